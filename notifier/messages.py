from __future__ import annotations

from dataclasses import dataclass, field
import json
from typing import Any, Union

from .errors import ParseFailure, ValidationFailure


VULN_SUMMARY = "vuln_summary"
PACKAGE_UPDATE = "package_update"

SEVERITY_LEVELS = ("CRITICAL", "HIGH", "MEDIUM", "LOW", "NONE")


@dataclass
class SeverityCounts:
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    none: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "CRITICAL": self.critical,
            "HIGH": self.high,
            "MEDIUM": self.medium,
            "LOW": self.low,
            "NONE": self.none,
        }


@dataclass
class VulnSummaryMessage:
    organization_id: str = ""
    analysis_id: str = ""
    project_id: str = ""
    project_name: str = ""
    severity_counts: SeverityCounts = field(default_factory=SeverityCounts)
    max_severity: str = ""
    total: int = 0
    top: Any = None

    kind = VULN_SUMMARY


@dataclass
class PackageUpdateMessage:
    organization_id: str
    package_name: str
    current_version: str
    new_version: str
    analysis_id: str = ""
    project_id: str = ""
    project_name: str = ""
    dependency_type: str = ""
    release_notes_url: str = ""
    project_count: int = 0

    kind = PACKAGE_UPDATE


@dataclass
class LegacyMessage:
    package: str
    version: str
    key: str = ""

    kind = "legacy"


InboundMessage = Union[VulnSummaryMessage, PackageUpdateMessage, LegacyMessage]


def parse_message(body: bytes) -> InboundMessage:
    """
    Classify a raw queue body into one of the typed message records.

    Typed payloads are recognized by their ``type`` field; anything else must
    be a flat string-to-string object in the legacy format.
    """
    data = _decode(body)
    message_type = data.get("type")
    if message_type == VULN_SUMMARY:
        return _vuln_summary(data)
    if message_type == PACKAGE_UPDATE:
        return _package_update(data)
    return _legacy(data)


def _decode(body: bytes) -> dict[str, Any]:
    try:
        data = json.loads(body, parse_constant=_reject_constant)
    except (TypeError, UnicodeDecodeError, ValueError) as exc:
        raise ParseFailure(f"message body is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseFailure("message body must be a JSON object")
    return data


def _reject_constant(token: str) -> Any:
    raise ValueError(f"{token} is not a valid JSON value")


def _vuln_summary(data: dict[str, Any]) -> VulnSummaryMessage:
    return VulnSummaryMessage(
        organization_id=_str(data, "organization_id"),
        analysis_id=_str(data, "analysis_id"),
        project_id=_str(data, "project_id"),
        project_name=_str(data, "project_name"),
        severity_counts=_severity_counts(data.get("severity_counts")),
        max_severity=_str(data, "max_severity"),
        total=_int(data, "total"),
        top=data.get("top"),
    )


def _package_update(data: dict[str, Any]) -> PackageUpdateMessage:
    message = PackageUpdateMessage(
        organization_id=_str(data, "organization_id"),
        package_name=_str(data, "package_name"),
        current_version=_str(data, "current_version"),
        new_version=_str(data, "new_version"),
        analysis_id=_str(data, "analysis_id"),
        project_id=_str(data, "project_id"),
        project_name=_str(data, "project_name"),
        dependency_type=_str(data, "dependency_type"),
        release_notes_url=_str(data, "release_notes_url"),
        project_count=_int(data, "project_count"),
    )
    missing = [
        name
        for name in ("organization_id", "package_name", "current_version", "new_version")
        if not getattr(message, name)
    ]
    if missing:
        raise ValidationFailure(f"incomplete package update payload: missing {', '.join(missing)}")
    return message


def _legacy(data: dict[str, Any]) -> LegacyMessage:
    for key, value in data.items():
        if not isinstance(value, str):
            raise ParseFailure(f"legacy message field {key!r} must be a string")
    package = data.get("package", "")
    version = data.get("version", "")
    if not package or not version:
        raise ValidationFailure("legacy message requires package and version")
    return LegacyMessage(package=package, version=version, key=data.get("key", ""))


def _severity_counts(value: Any) -> SeverityCounts:
    if not isinstance(value, dict):
        return SeverityCounts()
    counts = {level: _int(value, level) for level in SEVERITY_LEVELS}
    return SeverityCounts(
        critical=counts["CRITICAL"],
        high=counts["HIGH"],
        medium=counts["MEDIUM"],
        low=counts["LOW"],
        none=counts["NONE"],
    )


def _str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _int(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    # bool is an int subclass but never a count
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    try:
        return int(value)
    except (OverflowError, ValueError):
        return 0
