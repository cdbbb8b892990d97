# critico/infrastructure/database/session.py

from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from critico.config.settings import settings
from critico.infrastructure.database.base_model import BaseModel

_AFTER_COMMIT_KEY = "critico.after_commit"


def _build_engine():
    url = settings.database_url
    if url.startswith("sqlite"):
        # one shared connection so ":memory:" survives across sessions/threads
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=settings.debug, pool_pre_ping=True)


_engine = _build_engine()

_SessionLocal = sessionmaker(
    bind=_engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


def get_engine():
    return _engine


def init_db() -> None:
    import critico.infrastructure.database.models  # noqa: F401

    BaseModel.metadata.create_all(_engine)


def drop_db() -> None:
    import critico.infrastructure.database.models  # noqa: F401

    BaseModel.metadata.drop_all(_engine)


def on_commit(session: Session, callback: Callable[[], None]) -> None:
    """Run ``callback`` once the surrounding db_session() has committed."""
    session.info.setdefault(_AFTER_COMMIT_KEY, []).append(callback)


@contextmanager
def db_session() -> Iterator[Session]:
    session: Session = _SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        callbacks = session.info.pop(_AFTER_COMMIT_KEY, [])
        session.close()

    # only reached after a successful commit
    for callback in callbacks:
        callback()
