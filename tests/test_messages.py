from __future__ import annotations

import json
import unittest

from notifier.errors import ParseFailure, ValidationFailure
from notifier.messages import (
    LegacyMessage,
    PackageUpdateMessage,
    SeverityCounts,
    VulnSummaryMessage,
    parse_message,
)


def _body(payload: dict) -> bytes:
    return json.dumps(payload).encode("utf-8")


class ParseMessageTests(unittest.TestCase):
    def test_vuln_summary_fields_are_extracted(self) -> None:
        message = parse_message(
            _body(
                {
                    "type": "vuln_summary",
                    "organization_id": "org-1",
                    "analysis_id": "an-1",
                    "project_id": "pr-1",
                    "project_name": "frontend",
                    "severity_counts": {"CRITICAL": 2, "HIGH": 1.0, "LOW": 4, "BOGUS": 9},
                    "max_severity": "CRITICAL",
                    "total": 7.9,
                    "top": [{"id": "CVE-2024-0001"}],
                }
            )
        )
        self.assertIsInstance(message, VulnSummaryMessage)
        self.assertEqual(message.organization_id, "org-1")
        self.assertEqual(message.project_name, "frontend")
        self.assertEqual(message.total, 7)
        self.assertEqual(message.severity_counts, SeverityCounts(critical=2, high=1, low=4))
        self.assertEqual(message.top, [{"id": "CVE-2024-0001"}])

    def test_vuln_summary_defaults_missing_and_mistyped_fields(self) -> None:
        message = parse_message(
            _body({"type": "vuln_summary", "organization_id": 42, "total": "12", "severity_counts": []})
        )
        self.assertIsInstance(message, VulnSummaryMessage)
        self.assertEqual(message.organization_id, "")
        self.assertEqual(message.total, 0)
        self.assertEqual(message.max_severity, "")
        self.assertEqual(message.severity_counts.as_dict(), {"CRITICAL": 0, "HIGH": 0, "MEDIUM": 0, "LOW": 0, "NONE": 0})
        self.assertIsNone(message.top)

    def test_boolean_counts_are_ignored(self) -> None:
        message = parse_message(_body({"type": "vuln_summary", "total": True, "severity_counts": {"HIGH": True}}))
        self.assertEqual(message.total, 0)
        self.assertEqual(message.severity_counts.high, 0)

    def test_package_update_fields_are_extracted(self) -> None:
        message = parse_message(
            _body(
                {
                    "type": "package_update",
                    "organization_id": "org-1",
                    "package_name": "lodash",
                    "current_version": "4.17.0",
                    "new_version": "4.17.21",
                    "dependency_type": "production",
                    "project_count": 3,
                    "release_notes_url": "https://example.com/notes",
                }
            )
        )
        self.assertIsInstance(message, PackageUpdateMessage)
        self.assertEqual(message.package_name, "lodash")
        self.assertEqual(message.project_count, 3)
        self.assertEqual(message.project_name, "")
        self.assertEqual(message.release_notes_url, "https://example.com/notes")

    def test_package_update_requires_core_fields(self) -> None:
        payload = {
            "type": "package_update",
            "organization_id": "",
            "package_name": "lodash",
            "current_version": "4.17.0",
            "new_version": "4.17.21",
        }
        with self.assertRaises(ValidationFailure) as ctx:
            parse_message(_body(payload))
        self.assertIn("organization_id", str(ctx.exception))

        payload["organization_id"] = "org-1"
        del payload["new_version"]
        with self.assertRaises(ValidationFailure):
            parse_message(_body(payload))

    def test_legacy_message(self) -> None:
        message = parse_message(_body({"package": "express", "version": "4.18.2", "key": "n-1"}))
        self.assertEqual(message, LegacyMessage(package="express", version="4.18.2", key="n-1"))

    def test_unknown_type_falls_back_to_legacy(self) -> None:
        message = parse_message(_body({"type": "other", "package": "express", "version": "1.0.0"}))
        self.assertIsInstance(message, LegacyMessage)
        self.assertEqual(message.key, "")

    def test_legacy_message_with_non_string_value_is_a_parse_failure(self) -> None:
        with self.assertRaises(ParseFailure):
            parse_message(_body({"package": "express", "version": 4}))

    def test_legacy_message_without_package_is_invalid(self) -> None:
        with self.assertRaises(ValidationFailure):
            parse_message(_body({"key": "n-1"}))

    def test_malformed_bodies_are_parse_failures(self) -> None:
        for body in (
            b"not json",
            b"",
            b"[1, 2]",
            b"\xff\xfe\x00",
            b'"text"',
            b'{"type": "package_update", "project_count": NaN}',
            b'{"type": "vuln_summary", "total": Infinity}',
            b'{"package": "express", "version": "1.0.0", "key": -Infinity}',
        ):
            with self.subTest(body=body):
                with self.assertRaises(ParseFailure):
                    parse_message(body)
