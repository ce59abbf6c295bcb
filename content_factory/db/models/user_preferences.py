from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON

from .base import timestamp_field



class UserPreferences(SQLModel, table=True):
    """Préférences de génération d'un utilisateur (template HeyGen vertical)."""

    __tablename__ = "user_preferences"

    user_id: str = Field(primary_key=True)
    heygen_vertical_template_id: Optional[str] = None
    heygen_vertical_template_script_key: str = Field(default="script")
    heygen_vertical_template_variables: Dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )
    # overrides par node id : {"node-1": {"motion_engine": "..."}}
    heygen_vertical_template_overrides: Dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )
    updated_at: datetime = timestamp_field()
