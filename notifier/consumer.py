from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging
from pathlib import Path
import sys
from typing import IO, Iterator

from .dispatcher import CREATED, DROPPED, FAILED, LEGACY, SKIPPED, DispatchOutcome, NotificationDispatcher


class MessageSource(ABC):
    @abstractmethod
    def messages(self) -> Iterator[bytes]:
        """Yield raw message bodies in delivery order."""
        raise NotImplementedError


class StaticSource(MessageSource):
    def __init__(self, bodies: list[bytes]) -> None:
        self._bodies = bodies

    def messages(self) -> Iterator[bytes]:
        yield from self._bodies


class JsonLinesSource(MessageSource):
    """Reads one message body per line from a file, or stdin for ``-``."""

    def __init__(self, path: str) -> None:
        self._path = path

    def messages(self) -> Iterator[bytes]:
        if self._path == "-":
            yield from _read_lines(sys.stdin.buffer)
            return
        with Path(self._path).open("rb") as handle:
            yield from _read_lines(handle)


def _read_lines(handle: IO[bytes]) -> Iterator[bytes]:
    for line in handle:
        cleaned = line.strip()
        if cleaned:
            yield cleaned


@dataclass
class ConsumeSummary:
    received: int = 0
    created: int = 0
    skipped: int = 0
    legacy: int = 0
    dropped: int = 0
    failed: int = 0

    def record(self, outcome: DispatchOutcome) -> None:
        self.received += 1
        if outcome.status == CREATED:
            self.created += 1
        elif outcome.status == SKIPPED:
            self.skipped += 1
        elif outcome.status == LEGACY:
            self.legacy += 1
        elif outcome.status == DROPPED:
            self.dropped += 1
        elif outcome.status == FAILED:
            self.failed += 1


def consume(source: MessageSource, dispatcher: NotificationDispatcher) -> ConsumeSummary:
    logger = logging.getLogger(__name__)
    summary = ConsumeSummary()
    for body in source.messages():
        try:
            outcome = dispatcher.handle(body)
        except Exception as exc:
            logger.exception("Unexpected error while handling message: %s", exc)
            outcome = DispatchOutcome(status=FAILED, reason=str(exc))
        summary.record(outcome)

    logger.info(
        "Consume complete: %s received, %s created, %s skipped, %s legacy, %s dropped, %s failed",
        summary.received,
        summary.created,
        summary.skipped,
        summary.legacy,
        summary.dropped,
        summary.failed,
    )
    return summary
