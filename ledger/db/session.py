from contextlib import contextmanager
import os
from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ..models.base import Base


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///data/ledger.db")


def build_engine(url: str = DATABASE_URL, **kwargs):
    # sqlite needs the parent directory of its file before the first connect
    if url.startswith("sqlite:///") and ":memory:" not in url:
        Path(url.split("sqlite:///")[-1]).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, future=True, **kwargs)


def make_session_factory(bind):
    """Return a ``get_session``-style context manager bound to ``bind``."""
    factory = sessionmaker(bind=bind, autoflush=False, expire_on_commit=False, future=True)

    @contextmanager
    def session_scope():
        session = factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return session_scope


def init_db(bind) -> None:
    from .. import models  # noqa: F401  registers every table on Base.metadata

    Base.metadata.create_all(bind)


_engine = None
_default_scope = None


def get_engine():
    global _engine
    if _engine is None:
        _engine = build_engine(DATABASE_URL)
    return _engine


@contextmanager
def get_session():
    global _default_scope
    if _default_scope is None:
        _default_scope = make_session_factory(get_engine())
    with _default_scope() as session:
        yield session
