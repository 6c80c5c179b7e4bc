from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import sessionmaker

from studytimer.models import Base

_IN_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}


def create_store_engine(url: str) -> Engine:
    """Create the engine behind the key-value store and make sure its table exists."""
    kwargs: dict = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in _IN_MEMORY_URLS:
            # Every connection must see the same in-memory database
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)
    Base.metadata.create_all(engine)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(engine, expire_on_commit=False)
