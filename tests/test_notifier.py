"""Tests for progress notifications."""

import logging
from unittest.mock import MagicMock

from marksync.utils.notifier import (
    NoReceiverError,
    ProgressNotifier,
    report_progress,
)


class TestProgressNotifier:
    def test_emits_to_connected_slot(self):
        notifier = ProgressNotifier()
        received = []
        notifier.message.connect(received.append)

        notifier.notify({"action": "updateProgress", "progress": 42})
        assert received == [{"action": "updateProgress", "progress": 42}]

    def test_no_receiver(self):
        notifier = ProgressNotifier()
        try:
            notifier.notify({"action": "updateProgress", "progress": 1})
        except NoReceiverError:
            pass
        else:
            raise AssertionError("expected NoReceiverError")


class TestReportProgress:
    def test_sends_update_message(self):
        notifier = MagicMock()
        report_progress(notifier, 12.5)
        notifier.notify.assert_called_once_with({"action": "updateProgress", "progress": 12.5})

    def test_none_notifier(self):
        report_progress(None, 50)

    def test_no_receiver_is_silent(self, caplog):
        with caplog.at_level(logging.DEBUG):
            report_progress(ProgressNotifier(), 50)
        assert caplog.records == []

    def test_other_failures_logged(self, caplog):
        notifier = MagicMock()
        notifier.notify.side_effect = RuntimeError("listener crashed")
        with caplog.at_level(logging.ERROR, logger="marksync.utils.notifier"):
            report_progress(notifier, 50)
        assert "Failed to deliver progress update" in caplog.text
