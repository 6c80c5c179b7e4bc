from datetime import datetime
from typing import Literal

from pydantic import BaseModel

FeedKind = Literal["toast", "sound", "ambient.play", "ambient.stop"]


class FeedEvent(BaseModel):
    id: int
    kind: FeedKind
    created_at: datetime
    message: str | None = None
    level: str | None = None  # info, success, error
    url: str | None = None
    loop: bool = False


class AmbientState(BaseModel):
    url: str | None
    catalogue: dict[str, str]


class AmbientUpdate(BaseModel):
    url: str | None = None
