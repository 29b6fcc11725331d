from __future__ import annotations

from dataclasses import dataclass
import logging
import time
import uuid

from .errors import ParseFailure, ResolutionFailure, ValidationFailure, WriteFailure
from .messages import (
    LegacyMessage,
    PackageUpdateMessage,
    VulnSummaryMessage,
    parse_message,
)
from .render import RenderedNotification, render_package_update, render_vuln_summary
from .store import NotificationWriter, RecipientResolver


CREATED = "created"
SKIPPED = "skipped"
LEGACY = "legacy"
DROPPED = "dropped"
FAILED = "failed"


@dataclass
class DispatchOutcome:
    status: str
    kind: str | None = None
    notification_id: uuid.UUID | None = None
    attached: int = 0
    reason: str = ""


class NotificationDispatcher:
    """
    Routes one queue message to its renderer and persists the result.

    Every domain failure ends up as a logged DispatchOutcome; nothing is
    raised back to the queue consumer.
    """

    def __init__(self, resolver: RecipientResolver, writer: NotificationWriter) -> None:
        self._resolver = resolver
        self._writer = writer
        self._logger = logging.getLogger(__name__)

    def handle(self, body: bytes) -> DispatchOutcome:
        started = time.monotonic()
        outcome = self._handle(body)
        self._logger.debug(
            "Message processed in %.3fs with status %s", time.monotonic() - started, outcome.status
        )
        return outcome

    def _handle(self, body: bytes) -> DispatchOutcome:
        try:
            message = parse_message(body)
        except ParseFailure as exc:
            self._logger.warning("Dropping unparseable message: %s", exc)
            return DispatchOutcome(status=DROPPED, reason=str(exc))
        except ValidationFailure as exc:
            self._logger.warning("Dropping invalid message: %s", exc)
            return DispatchOutcome(status=DROPPED, reason=str(exc))

        self._logger.info("Received %s message", message.kind)
        try:
            if isinstance(message, VulnSummaryMessage):
                return self._vuln_summary(message)
            if isinstance(message, PackageUpdateMessage):
                return self._package_update(message)
            return self._legacy(message)
        except (ResolutionFailure, WriteFailure) as exc:
            self._logger.error("Failed to process %s message: %s", message.kind, exc)
            return DispatchOutcome(status=FAILED, kind=message.kind, reason=str(exc))

    def _vuln_summary(self, message: VulnSummaryMessage) -> DispatchOutcome:
        rendered = render_vuln_summary(message)
        recipients = self._resolver.resolve(message.organization_id)
        if not recipients:
            self._logger.warning(
                "No users found for organization %s; creating unattached notification",
                message.organization_id,
            )
        return self._write(rendered, recipients)

    def _package_update(self, message: PackageUpdateMessage) -> DispatchOutcome:
        rendered = render_package_update(message)
        recipients = self._resolver.resolve(message.organization_id)
        if not recipients:
            self._logger.warning(
                "No users found for organization %s; skipping %s update",
                message.organization_id,
                message.package_name,
            )
            return DispatchOutcome(
                status=SKIPPED,
                kind=message.kind,
                reason=f"no users found for organization {message.organization_id}",
            )
        return self._write(rendered, recipients)

    def _legacy(self, message: LegacyMessage) -> DispatchOutcome:
        # legacy requests no longer produce notifications
        self._logger.info(
            "Legacy request for %s@%s (key %s) acknowledged",
            message.package,
            message.version,
            message.key or "-",
        )
        return DispatchOutcome(status=LEGACY, kind=message.kind)

    def _write(self, rendered: RenderedNotification, recipients: list[str]) -> DispatchOutcome:
        result = self._writer.write(rendered, recipients)
        self._logger.info(
            "%s notification %s created; attached to %s users",
            rendered.content_type,
            result.notification_id,
            result.attached,
        )
        return DispatchOutcome(
            status=CREATED,
            kind=rendered.content_type,
            notification_id=result.notification_id,
            attached=result.attached,
        )
