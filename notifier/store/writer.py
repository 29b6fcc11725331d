from __future__ import annotations

from dataclasses import dataclass
import logging
import uuid

from sqlalchemy import Table
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from ..errors import WriteFailure
from ..render import RenderedNotification
from .schema import notification, notification_users


@dataclass
class WriteResult:
    notification_id: uuid.UUID
    attached: int


class NotificationWriter:
    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._logger = logging.getLogger(__name__)

    def write(self, rendered: RenderedNotification, recipients: list[str]) -> WriteResult:
        """
        Insert the notification and its recipient rows in one transaction.

        A recipient row that fails is logged and skipped; a failed notification
        insert or commit rolls the whole transaction back and raises WriteFailure.
        """
        notification_id = uuid.uuid4()
        try:
            with self._engine.begin() as connection:
                connection.execute(
                    notification.insert().values(
                        id=notification_id,
                        title=rendered.title,
                        description=rendered.description,
                        content=rendered.content,
                        type=rendered.type,
                        content_type=rendered.content_type,
                    )
                )
                attached = 0
                for user_id in recipients:
                    if _attach(connection, notification_id, user_id, self._logger):
                        attached += 1
        except SQLAlchemyError as exc:
            raise WriteFailure(f"{rendered.content_type} notification write failed: {exc}") from exc

        return WriteResult(notification_id=notification_id, attached=attached)


def _attach(connection: Connection, notification_id: uuid.UUID, user_id: str, logger: logging.Logger) -> bool:
    statement = (
        _insert(connection, notification_users)
        .values(notificationId=notification_id, userId=user_id)
        .on_conflict_do_nothing()
    )
    try:
        # a failed row rolls back to its own savepoint only
        with connection.begin_nested():
            result = connection.execute(statement)
    except SQLAlchemyError as exc:
        logger.error("Attach user %s to notification %s failed: %s", user_id, notification_id, exc)
        return False
    return result.rowcount > 0


def _insert(connection: Connection, table: Table):
    if connection.dialect.name == "sqlite":
        return sqlite.insert(table)
    return postgresql.insert(table)
