from .engine import build_engine
from .recipients import RecipientResolver
from .schema import metadata
from .writer import NotificationWriter, WriteResult

__all__ = [
    "NotificationWriter",
    "RecipientResolver",
    "WriteResult",
    "build_engine",
    "metadata",
]
