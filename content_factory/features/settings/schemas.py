from typing import Literal
from pydantic import BaseModel

VideoProvider = Literal["poyo", "kie"]


class VideoProviderIn(BaseModel):
    provider: VideoProvider


class VideoProviderOut(BaseModel):
    provider: VideoProvider
