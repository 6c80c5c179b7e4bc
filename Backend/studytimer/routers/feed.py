from fastapi import APIRouter, Depends, Query

from studytimer.dependencies import get_engine
from studytimer.schemas.feed import AmbientState, AmbientUpdate, FeedEvent
from studytimer.services.audio_service import AMBIENT_SOUNDS
from studytimer.services.engine import StudySessionEngine

router = APIRouter(tags=["feed"])


@router.get("/feed", response_model=list[FeedEvent])
async def poll_feed(
    after: int = Query(default=0, ge=0),
    engine: StudySessionEngine = Depends(get_engine),
):
    """Toasts and audio cues published after the given event id."""
    return engine.feed.events(after)


@router.get("/ambient", response_model=AmbientState)
async def get_ambient(engine: StudySessionEngine = Depends(get_engine)):
    return AmbientState(url=engine.ambient.current, catalogue=AMBIENT_SOUNDS)


@router.put("/ambient", response_model=AmbientState)
async def set_ambient(
    data: AmbientUpdate,
    engine: StudySessionEngine = Depends(get_engine),
):
    engine.set_ambient_sound(data.url)
    return AmbientState(url=engine.ambient.current, catalogue=AMBIENT_SOUNDS)
