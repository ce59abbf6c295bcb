from typing import Optional
from pydantic import BaseModel, Field as PydField

from content_factory.db.models.videos import VideoStyle


class ScriptLimitIn(BaseModel):
    script: str
    duration: int = PydField(..., description="Durée cible en secondes")


class ScriptLimitOut(BaseModel):
    script: str
    was_trimmed: bool
    max_words: int
    word_count: int
    max_characters: int


class VoiceoverPromptIn(BaseModel):
    topic: str = PydField(..., min_length=1)
    style: VideoStyle = VideoStyle.PROFESSIONAL
    script: Optional[str] = None
    duration: Optional[int] = None


class VoiceoverPromptOut(BaseModel):
    prompt: str
