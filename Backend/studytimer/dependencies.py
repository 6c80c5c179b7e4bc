from fastapi import HTTPException, Request, status

from studytimer.services.engine import StudySessionEngine


async def get_engine(request: Request) -> StudySessionEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Study session engine is not running",
        )
    return engine
