"""Entry point for marksync."""

import argparse
import logging
import sys

from PyQt6.QtCore import QCoreApplication

from marksync.app import ImportWorker, RefreshScheduler
from marksync.operations.gate import TriggerKind
from marksync.operations.importer import ImportResult
from marksync.utils.config import create_default_config, get_logging_config
from marksync.utils.logging_setup import setup_logging

logger = logging.getLogger("marksync")


def main():
    parser = argparse.ArgumentParser(description="Mirror the remote bookmark database locally.")
    parser.add_argument("trigger", nargs="?", default=TriggerKind.MANUAL.value,
                        choices=[t.value for t in TriggerKind])
    parser.add_argument("--watch", action="store_true",
                        help="keep running and re-import on the configured schedule")
    parser.add_argument("--log-file", default=None)
    args = parser.parse_args()

    create_default_config()
    setup_logging(get_logging_config()["level"], args.log_file)

    app = QCoreApplication(sys.argv)

    worker = ImportWorker(TriggerKind(args.trigger))
    worker.notifier.message.connect(
        lambda message: logger.debug("Progress %.1f%%", message["progress"])
    )

    scheduler = RefreshScheduler(parent=app)
    watching = args.watch and scheduler.start()

    def on_finished(result: str):
        logger.info("Import finished: %s", result)
        if not watching:
            failed = result in (ImportResult.FAILED.value, ImportResult.ABORTED.value)
            app.exit(1 if failed else 0)

    worker.finished_import.connect(on_finished)
    worker.start()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
