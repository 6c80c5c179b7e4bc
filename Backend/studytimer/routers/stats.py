from fastapi import APIRouter, Depends

from studytimer.dependencies import get_engine
from studytimer.schemas.stats import GoalUpdate, StatsResponse
from studytimer.services.engine import StudySessionEngine

router = APIRouter(prefix="/stats", tags=["stats"])


def _stats_response(engine: StudySessionEngine) -> StatsResponse:
    stats = engine.stats
    return StatsResponse(
        **stats.model_dump(),
        goal_minutes=stats.goal_minutes,
        progress_percent=stats.progress_percent,
        active_session_count=engine.active_session_count,
        last_rollover_date=engine.stats_engine.last_rollover_date,
    )


@router.get("", response_model=StatsResponse)
async def get_stats(engine: StudySessionEngine = Depends(get_engine)):
    return _stats_response(engine)


@router.put("/goal", response_model=StatsResponse)
async def update_daily_goal(
    data: GoalUpdate,
    engine: StudySessionEngine = Depends(get_engine),
):
    engine.update_daily_goal(data.hours)
    return _stats_response(engine)
