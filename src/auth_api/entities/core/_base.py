"""Shared bases for domain entities and their tables.

Every entity carries a string UUID and UTC creation/update timestamps; the
table base mirrors those columns so rows validate straight into entities.
"""

import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


class Entity(BaseModel):
    id: str = PydanticField(default_factory=new_id, description="Entity identifier")
    created_at: datetime = PydanticField(default_factory=utcnow)
    updated_at: datetime = PydanticField(default_factory=utcnow)


class EntityTable(SQLModel, table=False):
    id: str = Field(primary_key=True, default_factory=new_id)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
    )

    def touch(self) -> None:
        """Stamp the row as modified now."""
        self.updated_at = utcnow()
