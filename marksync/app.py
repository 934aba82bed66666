"""Application harness - trigger entry points, workers and scheduling."""

import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from PyQt6.QtCore import QObject, QThread, QTimer, pyqtSignal

from .models.bookmark import BookmarkStore
from .operations.errors import StoreFailure
from .operations.firefox import FirefoxPlacesTarget
from .operations.gate import TriggerKind
from .operations.importer import ImportResult, TreeImporter
from .operations.target import BookmarkTarget
from .utils.config import get_schedule_config, get_target_config
from .utils.fetcher import RemoteSource
from .utils.notifier import ProgressNotifier
from .utils.state import MarkerStore

logger = logging.getLogger(__name__)

_locks: Dict[Tuple[str, str], threading.Lock] = {}
_locks_guard = threading.Lock()


def _root_lock(kind: str, root: str) -> threading.Lock:
    """One lock per target root so two imports never interleave."""
    with _locks_guard:
        return _locks.setdefault((kind, root), threading.Lock())


@contextmanager
def open_target(settings: Dict) -> Iterator[BookmarkTarget]:
    """Open the configured bookmark target."""
    kind = settings.get("kind", "store")
    if kind == "firefox":
        places_path = Path(settings["places_path"]) if settings.get("places_path") else None
        with FirefoxPlacesTarget.open(places_path) as target:
            yield target
    elif kind == "store":
        yield BookmarkStore.load()
    else:
        raise StoreFailure(f"Unknown target kind: {kind}")


def run_trigger(trigger: TriggerKind, notifier: Optional[ProgressNotifier] = None,
                source: Optional[RemoteSource] = None,
                markers: Optional[MarkerStore] = None) -> ImportResult:
    """Run one import for ``trigger`` against the configured target."""
    settings = get_target_config()
    source = source or RemoteSource.from_config()
    markers = markers or MarkerStore()

    with _root_lock(settings["kind"], settings["root"]):
        logger.info("Starting %s import into %s/%s", trigger.value, settings["kind"], settings["root"])
        try:
            with open_target(settings) as target:
                importer = TreeImporter(
                    source=source,
                    target=target,
                    markers=markers,
                    root_id=target.root_id(settings["root"]),
                    folder_title=settings["folder_title"],
                    notifier=notifier,
                )
                return importer.run(trigger)
        except StoreFailure as e:
            logger.error("Could not open bookmark target: %s", e)
            return ImportResult.ABORTED


def on_installed(details: dict) -> Optional[ImportResult]:
    if details.get("reason") == "install":
        return run_trigger(TriggerKind.INSTALL)
    return None


def on_startup(details: dict) -> Optional[ImportResult]:
    if details.get("reason") == "startup":
        return run_trigger(TriggerKind.STARTUP)
    return None


def on_message(message: dict, notifier: Optional[ProgressNotifier] = None) -> Optional[ImportResult]:
    """Handle a message from the UI; the reload button forces a rebuild."""
    if message.get("action") == "reloadButton":
        return run_trigger(TriggerKind.MANUAL, notifier=notifier)
    return None


class ImportWorker(QThread):
    """Worker thread running a single import."""

    finished_import = pyqtSignal(str)  # ImportResult value

    def __init__(self, trigger: TriggerKind, parent=None):
        super().__init__(parent)
        self.trigger = trigger
        self.notifier = ProgressNotifier()
        self.result: Optional[ImportResult] = None

    def run(self):
        self.result = run_trigger(self.trigger, notifier=self.notifier)
        self.finished_import.emit(self.result.value)


class RefreshScheduler(QObject):
    """Fires scheduled imports at the configured interval."""

    triggered = pyqtSignal()

    def __init__(self, interval_hours: Optional[float] = None, parent=None):
        super().__init__(parent)
        if interval_hours is None:
            interval_hours = float(get_schedule_config().get("interval_hours", 0))
        self.interval_hours = interval_hours
        self._worker: Optional[ImportWorker] = None
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._on_timeout)

    def start(self) -> bool:
        """Start the timer. Returns False when scheduling is disabled."""
        if self.interval_hours <= 0:
            return False
        self._timer.start(int(self.interval_hours * 3600 * 1000))
        return True

    def stop(self):
        self._timer.stop()

    def is_active(self) -> bool:
        return self._timer.isActive()

    def _on_timeout(self):
        if self._worker is not None and self._worker.isRunning():
            logger.info("Previous scheduled import still running, skipping this tick")
            return
        self.triggered.emit()
        self._worker = ImportWorker(TriggerKind.SCHEDULED, self)
        self._worker.finished.connect(self._on_worker_finished)
        self._worker.start()

    def _on_worker_finished(self):
        worker, self._worker = self._worker, None
        if worker is not None:
            worker.deleteLater()
