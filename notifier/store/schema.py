from __future__ import annotations

import uuid

from sqlalchemy import JSON, Column, MetaData, PrimaryKeyConstraint, String, Table, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB


metadata = MetaData()

# The tables are owned by the platform API; these definitions only cover the
# columns this service reads or writes.
notification = Table(
    "notification",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("title", String, nullable=False),
    Column("description", Text, nullable=False),
    Column("content", JSON().with_variant(JSONB(), "postgresql"), nullable=False),
    Column("type", String, nullable=False),
    Column("content_type", String, nullable=False),
)

notification_users = Table(
    "notification_users_user",
    metadata,
    Column("notificationId", Uuid, nullable=False),
    Column("userId", String, nullable=False),
    PrimaryKeyConstraint("notificationId", "userId"),
)

organization_memberships = Table(
    "organization_memberships",
    metadata,
    Column("organizationId", String, nullable=False),
    Column("userId", String, nullable=False),
)
