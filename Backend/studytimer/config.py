from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    STORE_URL: str = "sqlite:///./study_state.db"

    # Dashboard API (notifications, courses)
    API_BASE_URL: str = "http://localhost:5000/api"
    API_TOKEN: str = ""
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # Timer engine
    TICK_INTERVAL_SECONDS: float = 1.0
    DEFAULT_SESSION_MINUTES: int = 25
    FOCUS_MINUTES: int = 25
    BREAK_MINUTES: int = 5
    DEFAULT_DAILY_GOAL_HOURS: float = 4
    DEFAULT_SESSION_TITLE: str = "Focus Session"
    DEFAULT_SOUND_URL: str = "https://assets.mixkit.co/active_storage/sfx/2869/2869-preview.mp3"
    FEED_MAX_EVENTS: int = 200

    # Observability
    SENTRY_DSN: str = ""
    LOG_LEVEL: str = "INFO"

    ENVIRONMENT: str = "development"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
