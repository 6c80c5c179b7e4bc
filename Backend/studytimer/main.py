import logging
from contextlib import asynccontextmanager

import httpx
import sentry_sdk
from fastapi import FastAPI

from studytimer.config import settings
from studytimer.database import create_store_engine
from studytimer.services.course_service import CourseClient
from studytimer.services.engine import StudySessionEngine
from studytimer.services.notification_service import NotificationClient
from studytimer.services.store_service import KeyValueStore
from studytimer.services.ui_feed import UIFeed

# Initialize Sentry
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=0.2 if settings.ENVIRONMENT == "production" else 1.0,
        send_default_pii=False,
    )


def build_engine(store: KeyValueStore, http_client: httpx.AsyncClient) -> StudySessionEngine:
    return StudySessionEngine(
        store,
        NotificationClient(http_client, settings.API_BASE_URL, settings.API_TOKEN),
        CourseClient(http_client, settings.API_BASE_URL, settings.API_TOKEN),
        UIFeed(settings.FEED_MAX_EVENTS),
        default_minutes=settings.DEFAULT_SESSION_MINUTES,
        focus_minutes=settings.FOCUS_MINUTES,
        break_minutes=settings.BREAK_MINUTES,
        default_goal_hours=settings.DEFAULT_DAILY_GOAL_HOURS,
        default_sound=settings.DEFAULT_SOUND_URL,
        default_title=settings.DEFAULT_SESSION_TITLE,
        tick_interval=settings.TICK_INTERVAL_SECONDS,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.LOG_LEVEL)

    # Startup: open the store and the shared HTTP client, start ticking
    store_engine = create_store_engine(settings.STORE_URL)
    http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
    app.state.engine = build_engine(KeyValueStore(store_engine), http_client)
    app.state.engine.start()

    yield

    # Shutdown
    await app.state.engine.stop()
    await http_client.aclose()
    store_engine.dispose()


app = FastAPI(
    title="Study Timer API",
    version="0.1.0",
    lifespan=lifespan,
)

# Middleware
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from studytimer.middleware.error_handler import register_error_handlers  # noqa: E402

register_error_handlers(app)

# Routers
from studytimer.routers.feed import router as feed_router  # noqa: E402
from studytimer.routers.sessions import router as sessions_router  # noqa: E402
from studytimer.routers.stats import router as stats_router  # noqa: E402

app.include_router(sessions_router)
app.include_router(stats_router)
app.include_router(feed_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
