from enum import Enum
from typing import Optional

from sqlmodel import Field
from sqlalchemy import Column, ForeignKey, String

from .base import BaseModelDB


class VideoStyle(str, Enum):
    CASUAL = "casual"
    PROFESSIONAL = "professional"
    ENERGETIC = "energetic"
    EDUCATIONAL = "educational"


class VideoStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


class Video(BaseModelDB, table=True):
    """Une demande de génération et son résultat."""

    __tablename__ = "videos"

    user_id: str = Field(index=True, description="Propriétaire de la vidéo")
    topic: str
    script: Optional[str] = Field(default=None)
    style: str = Field(default=VideoStyle.PROFESSIONAL.value)
    duration: int = Field(description="Durée cible en secondes")
    aspect_ratio: Optional[str] = Field(default=None, description="ex: 9:16")
    output_resolution: Optional[str] = Field(default=None, description="ex: 720p, 1080p")
    status: str = Field(default=VideoStatus.PENDING.value, index=True)
    provider: str = Field(default="heygen")
    video_url: Optional[str] = Field(default=None)
    heygen_video_id: Optional[str] = Field(
        default=None,
        index=True,
        description="Identifiant de la tâche côté fournisseur (posé une seule fois par dispatch)",
    )
    error_message: Optional[str] = Field(default=None)

    avatar_id: Optional[str] = Field(
        default=None,
        sa_column=Column(
            String,
            ForeignKey("avatars.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
        description="Avatar interne utilisé pour le rendu",
    )
