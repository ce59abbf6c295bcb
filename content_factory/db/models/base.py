"""
➡️ But : Définir la structure des tables de la base (ORM).

Propriétés communes des tables : identifiant uuid (texte, compatible Postgres/Supabase
et SQLite) et horodatage.

Tous les horodatages sont en UTC *avec* fuseau (datetime.now(timezone.utc)).
UTCDateTime garantit la même chose en lecture : SQLite ne stocke pas le fuseau,
la valeur relue est donc re-marquée UTC.
"""

from typing import Any
from uuid import uuid4
from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator
from sqlmodel import SQLModel, Field


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            # valeur naïve = UTC par convention
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def timestamp_field(**kwargs) -> Any:
    return Field(default_factory=utcnow, sa_type=UTCDateTime, **kwargs)


class BaseModelDB(SQLModel, table=False):
    id: str = Field(default_factory=new_id, primary_key=True)
    created_at: datetime = timestamp_field(index=True)
    updated_at: datetime = timestamp_field()
