from fastapi import APIRouter, Depends, HTTPException, status

from studytimer.dependencies import get_engine
from studytimer.schemas.session import (
    CourseSessionRequest,
    FinishResponse,
    PresetRequest,
    SessionCreate,
    SessionUpdate,
    StudySession,
)
from studytimer.services.engine import StudySessionEngine

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")


@router.get("", response_model=list[StudySession])
async def list_sessions(engine: StudySessionEngine = Depends(get_engine)):
    return engine.sessions


@router.post("", response_model=StudySession, status_code=201)
async def create_session(
    data: SessionCreate,
    engine: StudySessionEngine = Depends(get_engine),
):
    return engine.add_session(data.title, data.course_id)


@router.post("/course", response_model=StudySession)
async def start_course_session(
    data: CourseSessionRequest,
    engine: StudySessionEngine = Depends(get_engine),
):
    """Open (or reuse) the session linked to a course."""
    return engine.start_course_session(data.course_id, data.title)


@router.post("/default", response_model=StudySession | None)
async def ensure_default_session(engine: StudySessionEngine = Depends(get_engine)):
    """Create the default session when there are none yet."""
    return engine.ensure_default_session()


@router.get("/{session_id}", response_model=StudySession)
async def get_session(session_id: str, engine: StudySessionEngine = Depends(get_engine)):
    session = engine.get_session(session_id)
    if session is None:
        raise _not_found()
    return session


@router.patch("/{session_id}", response_model=StudySession)
async def update_session(
    session_id: str,
    data: SessionUpdate,
    engine: StudySessionEngine = Depends(get_engine),
):
    session = engine.update_session(session_id, data.model_dump(exclude_unset=True))
    if session is None:
        raise _not_found()
    return session


@router.delete("/{session_id}", status_code=204)
async def delete_session(session_id: str, engine: StudySessionEngine = Depends(get_engine)):
    engine.remove_session(session_id)


@router.post("/{session_id}/toggle", response_model=StudySession)
async def toggle_session(session_id: str, engine: StudySessionEngine = Depends(get_engine)):
    session = engine.toggle_session(session_id)
    if session is None:
        raise _not_found()
    return session


@router.post("/{session_id}/reset", response_model=StudySession)
async def reset_session(session_id: str, engine: StudySessionEngine = Depends(get_engine)):
    session = engine.reset_session(session_id)
    if session is None:
        raise _not_found()
    return session


@router.post("/{session_id}/preset", response_model=StudySession)
async def apply_preset(
    session_id: str,
    data: PresetRequest,
    engine: StudySessionEngine = Depends(get_engine),
):
    session = engine.apply_preset(session_id, data.minutes)
    if session is None:
        raise _not_found()
    return session


@router.post("/{session_id}/finish", response_model=FinishResponse)
async def finish_session(session_id: str, engine: StudySessionEngine = Depends(get_engine)):
    """Save the time spent in a course-linked session to the course."""
    if engine.get_session(session_id) is None:
        raise _not_found()
    saved = await engine.finish_session(session_id)
    return FinishResponse(saved=saved, session=engine.get_session(session_id))
