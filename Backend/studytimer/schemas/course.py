from pydantic import BaseModel, Field


class Course(BaseModel):
    id: int
    title: str = ""
    completed_hours: float = Field(alias="completedHours")

    model_config = {"populate_by_name": True}
