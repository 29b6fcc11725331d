from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.engine import Engine

from notifier.config import DatabaseConfig
from notifier.store import build_engine, metadata
from notifier.store.schema import organization_memberships


def memory_engine(create_tables: bool = True) -> Engine:
    engine = build_engine(
        DatabaseConfig(
            host="",
            port=0,
            user="",
            password="",
            name="",
            connect_timeout_seconds=5,
            pool_size=1,
            override_url="sqlite://",
        )
    )
    if create_tables:
        metadata.create_all(engine)
    return engine


def add_members(engine: Engine, organization_id: str, user_ids: list[str]) -> None:
    with engine.begin() as connection:
        connection.execute(
            organization_memberships.insert(),
            [{"organizationId": organization_id, "userId": user_id} for user_id in user_ids],
        )


def count_rows(engine: Engine, table) -> int:
    with engine.connect() as connection:
        return connection.execute(select(func.count()).select_from(table)).scalar_one()
