from pydantic import BaseModel, Field


class StudyStats(BaseModel):
    completed_today: int = Field(default=0, ge=0)  # minutes
    daily_goal: float = 4  # hours
    streak: int = Field(default=0, ge=0)  # days
    yesterday: int = Field(default=0, ge=0)  # minutes

    model_config = {"frozen": True}

    @property
    def goal_minutes(self) -> float:
        return self.daily_goal * 60

    @property
    def progress_percent(self) -> float:
        """Share of the daily goal completed, clamped to 100."""
        if self.goal_minutes <= 0:
            return 0.0
        return min(self.completed_today / self.goal_minutes * 100, 100.0)


class StatsResponse(BaseModel):
    completed_today: int
    daily_goal: float
    streak: int
    yesterday: int
    goal_minutes: float
    progress_percent: float
    active_session_count: int
    last_rollover_date: str | None


class GoalUpdate(BaseModel):
    hours: float
