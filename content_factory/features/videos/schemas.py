from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field as PydField

from content_factory.db.models.videos import VideoStyle


# ---------- IN ----------

class DimensionIn(BaseModel):
    width: int = PydField(..., gt=0)
    height: int = PydField(..., gt=0)


class VideoCreateIn(BaseModel):
    topic: str = PydField(..., min_length=1, examples=["3 erreurs de débutant en trading"])
    script: Optional[str] = None
    style: VideoStyle = VideoStyle.PROFESSIONAL
    duration: int = PydField(..., ge=15, le=180, description="Durée cible en secondes")
    avatar_id: Optional[str] = PydField(None, description="Id interne ou id HeyGen ; vide = avatar par défaut")
    plan_item_id: Optional[str] = None
    aspect_ratio: Optional[str] = PydField(None, examples=["9:16"])
    output_resolution: Optional[str] = PydField(None, examples=["1080p"])
    dimension: Optional[DimensionIn] = None


# ---------- OUT ----------

class VideoOut(BaseModel):
    id: str
    topic: str
    script: Optional[str]
    style: str
    duration: int
    aspect_ratio: Optional[str] = None
    output_resolution: Optional[str] = None
    status: str
    provider: str
    video_url: Optional[str]
    heygen_video_id: Optional[str]
    avatar_id: Optional[str]
    error_message: Optional[str]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class VideoStatusOut(BaseModel):
    video: VideoOut
    progress: Optional[float] = None


class VideoListOut(BaseModel):
    items: list[VideoOut]
    total: int


class ShareUrlOut(BaseModel):
    share_url: str


class MessageOut(BaseModel):
    message: str
