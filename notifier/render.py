from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .messages import PACKAGE_UPDATE, VULN_SUMMARY, PackageUpdateMessage, VulnSummaryMessage


INFO = "info"
WARNING = "warning"
ERROR = "error"

VULN_SUMMARY_TITLE = "Vulnerability summary"
NO_VULNERABILITIES = "No vulnerabilities found"

SEVERITY_TYPES = {
    "CRITICAL": ERROR,
    "HIGH": ERROR,
    "MEDIUM": WARNING,
}

SEVERITY_ADVICE = {
    "CRITICAL": "Immediate attention recommended.",
    "HIGH": "Immediate attention recommended.",
    "MEDIUM": "Plan remediation soon.",
}
DEFAULT_ADVICE = "Monitor as needed."


@dataclass
class RenderedNotification:
    title: str
    description: str
    type: str
    content_type: str
    content: dict[str, Any]


def render_vuln_summary(message: VulnSummaryMessage) -> RenderedNotification:
    counts = message.severity_counts
    max_severity = message.max_severity

    description = NO_VULNERABILITIES
    if message.total > 0:
        description = (
            f"{message.total} vulnerabilities (Critical: {counts.critical}, High: {counts.high}, "
            f"Medium: {counts.medium}, Low: {counts.low}). Max severity: {max_severity}. "
            f"{SEVERITY_ADVICE.get(max_severity, DEFAULT_ADVICE)}"
        )

    content = {
        "analysis_id": message.analysis_id,
        "organization_id": message.organization_id,
        "project_id": message.project_id,
        "project_name": message.project_name,
        "total": message.total,
        "max_severity": max_severity,
        "severity_counts": counts.as_dict(),
        "top": message.top,
    }
    return RenderedNotification(
        title=VULN_SUMMARY_TITLE,
        description=description,
        type=SEVERITY_TYPES.get(max_severity, INFO),
        content_type=VULN_SUMMARY,
        content=content,
    )


def render_package_update(message: PackageUpdateMessage) -> RenderedNotification:
    package = message.package_name
    dependency_type = message.dependency_type

    if dependency_type == "production":
        title = f"🔴 Production Update: {package}"
        notification_type = WARNING
        subject = f"Production dependency {package}"
    elif dependency_type == "development":
        title = f"🟡 Dev Update: {package}"
        notification_type = INFO
        subject = f"Development dependency {package}"
    else:
        title = f"Update available: {package}"
        notification_type = INFO
        subject = package

    description = f"{subject} can be updated from {message.current_version} to {message.new_version}"
    if message.project_name:
        description += f" in {_project_reference(message)}"

    content = {
        "analysis_id": message.analysis_id,
        "organization_id": message.organization_id,
        "project_id": message.project_id,
        "project_name": message.project_name,
        "package_name": package,
        "current_version": message.current_version,
        "new_version": message.new_version,
        "dependency_type": dependency_type,
        "project_count": message.project_count,
        "release_notes_url": message.release_notes_url,
    }
    return RenderedNotification(
        title=title,
        description=description,
        type=notification_type,
        content_type=PACKAGE_UPDATE,
        content=content,
    )


def _project_reference(message: PackageUpdateMessage) -> str:
    if message.project_count > 1:
        return f"{message.project_count} projects"
    return message.project_name
