from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field as PydField

from content_factory.db.models.avatars import AvatarSource, AvatarStatus


# ---------- IN ----------

class AvatarCreateIn(BaseModel):
    heygen_avatar_id: str = PydField(..., min_length=1, description="Identifiant côté HeyGen (avatar ou groupe photo)")
    avatar_name: str = PydField(..., min_length=1)
    avatar_url: Optional[str] = None
    preview_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    source: AvatarSource = AvatarSource.SYNCED
    status: AvatarStatus = AvatarStatus.ACTIVE
    is_default: bool = False


# ---------- OUT ----------

class AvatarOut(BaseModel):
    id: str
    heygen_avatar_id: str
    avatar_name: str
    avatar_url: Optional[str]
    preview_url: Optional[str]
    thumbnail_url: Optional[str]
    source: str
    kind: Optional[str]
    status: str
    is_default: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
