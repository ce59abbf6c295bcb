from enum import Enum
from typing import Optional

from sqlmodel import Field
from sqlalchemy import UniqueConstraint

from .base import BaseModelDB


class AvatarSource(str, Enum):
    SYNCED = "synced"
    USER_PHOTO = "user_photo"
    AI_GENERATED = "ai_generated"


class AvatarKind(str, Enum):
    STANDARD = "standard"   # avatar HeyGen entraîné → champ avatar_id
    PHOTO = "photo"         # "talking photo" → champ talking_photo_id


class AvatarStatus(str, Enum):
    ACTIVE = "active"
    TRAINING = "training"
    PENDING = "pending"
    FAILED = "failed"


class Avatar(BaseModelDB, table=True):
    """Identité réutilisable pour les rendus d'un utilisateur."""

    __tablename__ = "avatars"
    __table_args__ = (UniqueConstraint("user_id", "heygen_avatar_id"),)

    user_id: str = Field(index=True)
    heygen_avatar_id: str = Field(index=True, description="Identifiant côté HeyGen")
    avatar_name: str
    avatar_url: Optional[str] = None
    preview_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    source: str = Field(default=AvatarSource.SYNCED.value)
    # None uniquement pour les lignes historiques, complété à la première résolution
    kind: Optional[str] = Field(default=None)
    status: str = Field(default=AvatarStatus.ACTIVE.value)
    is_default: bool = Field(default=False)
