from __future__ import annotations

from pathlib import Path
import tempfile
import unittest
from unittest.mock import MagicMock

from notifier.consumer import JsonLinesSource, StaticSource, consume
from notifier.dispatcher import CREATED, DROPPED, FAILED, LEGACY, SKIPPED, DispatchOutcome, NotificationDispatcher


class ConsumerTests(unittest.TestCase):
    def test_json_lines_source_skips_blank_lines(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "messages.jsonl"
            path.write_bytes(b'{"a": 1}\n\n  \n{"b": 2}\n')
            bodies = list(JsonLinesSource(str(path)).messages())

        self.assertEqual(bodies, [b'{"a": 1}', b'{"b": 2}'])

    def test_consume_counts_outcomes_and_survives_unexpected_errors(self) -> None:
        dispatcher = MagicMock(spec=NotificationDispatcher)
        dispatcher.handle.side_effect = [
            DispatchOutcome(status=CREATED, kind="vuln_summary", attached=2),
            DispatchOutcome(status=DROPPED, reason="bad json"),
            RuntimeError("boom"),
            DispatchOutcome(status=CREATED, kind="package_update", attached=1),
        ]
        source = StaticSource([b"1", b"2", b"3", b"4"])

        with self.assertLogs("notifier.consumer", level="ERROR"):
            summary = consume(source, dispatcher)

        self.assertEqual(dispatcher.handle.call_count, 4)
        self.assertEqual(summary.received, 4)
        self.assertEqual(summary.created, 2)
        self.assertEqual(summary.dropped, 1)
        self.assertEqual(summary.failed, 1)

    def test_failed_outcomes_are_counted(self) -> None:
        dispatcher = MagicMock(spec=NotificationDispatcher)
        dispatcher.handle.return_value = DispatchOutcome(status=FAILED, reason="write failed")

        summary = consume(StaticSource([b"{}"]), dispatcher)

        self.assertEqual(summary.failed, 1)
        self.assertEqual(summary.created, 0)

    def test_every_status_has_its_own_count(self) -> None:
        dispatcher = MagicMock(spec=NotificationDispatcher)
        dispatcher.handle.side_effect = [
            DispatchOutcome(status=CREATED, kind="vuln_summary"),
            DispatchOutcome(status=SKIPPED, kind="package_update"),
            DispatchOutcome(status=LEGACY, kind="legacy"),
            DispatchOutcome(status=LEGACY, kind="legacy"),
            DispatchOutcome(status=DROPPED),
            DispatchOutcome(status=FAILED),
        ]

        summary = consume(StaticSource([b"{}"] * 6), dispatcher)

        self.assertEqual(summary.legacy, 2)
        self.assertEqual(
            summary.received,
            summary.created + summary.skipped + summary.legacy + summary.dropped + summary.failed,
        )
