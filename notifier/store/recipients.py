from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..errors import ResolutionFailure
from .schema import organization_memberships


class RecipientResolver:
    """Looks up the members of an organization. Results are never cached."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._logger = logging.getLogger(__name__)

    def resolve(self, organization_id: str) -> list[str]:
        statement = select(organization_memberships.c.userId).where(
            organization_memberships.c.organizationId == organization_id
        )
        try:
            with self._engine.connect() as connection:
                rows = connection.execute(statement).scalars().all()
        except SQLAlchemyError as exc:
            raise ResolutionFailure(f"user fetch failed for organization {organization_id}: {exc}") from exc

        user_ids = _distinct(rows)
        self._logger.debug("Organization %s resolved to %s users", organization_id, len(user_ids))
        return user_ids


def _distinct(values) -> list[str]:
    seen: set[str] = set()
    user_ids: list[str] = []
    for value in values:
        if value is None:
            continue
        user_id = str(value)
        if not user_id or user_id in seen:
            continue
        seen.add(user_id)
        user_ids.append(user_id)
    return user_ids
