"""Best-effort progress notifications for a listening UI."""

import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

logger = logging.getLogger(__name__)

PROGRESS_ACTION = "updateProgress"


class NoReceiverError(Exception):
    """Nobody is listening for notifications."""


class ProgressNotifier(QObject):
    """Emits notification messages as a Qt signal."""

    message = pyqtSignal(dict)

    def notify(self, message: dict) -> None:
        if self.receivers(self.message) == 0:
            raise NoReceiverError("Receiving end does not exist")
        self.message.emit(message)


def report_progress(notifier: Optional[ProgressNotifier], progress: float) -> None:
    """Send a progress update, never failing the caller."""
    if notifier is None:
        return
    try:
        notifier.notify({"action": PROGRESS_ACTION, "progress": progress})
    except NoReceiverError:
        pass
    except Exception:
        logger.exception("Failed to deliver progress update")
