from typing import Optional

from sqlmodel import Field
from sqlalchemy import Column, ForeignKey, String

from .base import BaseModelDB


class VideoPlanItem(BaseModelDB, table=True):
    """Élément de planning (géré ailleurs) pouvant pointer vers une vidéo."""

    __tablename__ = "video_plan_items"

    user_id: str = Field(index=True)
    topic: Optional[str] = None
    script: Optional[str] = None
    status: str = Field(default="pending")
    error_message: Optional[str] = None

    video_id: Optional[str] = Field(
        default=None,
        sa_column=Column(
            String,
            ForeignKey("videos.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
    )
