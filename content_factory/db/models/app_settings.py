from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from .base import timestamp_field


class AppSetting(SQLModel, table=True):
    """Réglage global clé/valeur : une seule ligne par clé."""

    __tablename__ = "app_settings"

    key: str = Field(primary_key=True)
    value: Optional[str] = None
    updated_at: datetime = timestamp_field()
