from typing import Literal

from pydantic import BaseModel, Field

SessionMode = Literal["focus", "break"]


class StudySession(BaseModel):
    """One countdown timer. Instances are immutable snapshots."""

    id: str
    title: str
    course_id: int | None = None
    minutes: int = Field(ge=0)
    seconds: int = Field(ge=0, le=59)
    initial_minutes: int = Field(ge=0)
    is_active: bool = False
    selected_sound: str
    mode: SessionMode = "focus"
    auto_cycle: bool = False

    model_config = {"frozen": True}

    @property
    def remaining_seconds(self) -> int:
        return self.minutes * 60 + self.seconds

    @property
    def elapsed_seconds(self) -> int:
        return self.initial_minutes * 60 - self.remaining_seconds


# Fields a caller may change through update_session
EDITABLE_FIELDS = frozenset(StudySession.model_fields) - {"id"}


class SessionCreate(BaseModel):
    title: str = Field(default="", max_length=255)
    course_id: int | None = None


class CourseSessionRequest(BaseModel):
    course_id: int
    title: str = Field(min_length=1, max_length=255)


class SessionUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=255)
    course_id: int | None = None
    minutes: int | None = Field(default=None, ge=0)
    seconds: int | None = Field(default=None, ge=0, le=59)
    initial_minutes: int | None = Field(default=None, ge=0)
    is_active: bool | None = None
    selected_sound: str | None = None
    mode: SessionMode | None = None
    auto_cycle: bool | None = None


class PresetRequest(BaseModel):
    minutes: int


class FinishResponse(BaseModel):
    saved: bool
    session: StudySession | None
