from typing import Any, Dict, Iterator

from sqlmodel import SQLModel, Session, create_engine

from ..core.config import settings


def engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        # FastAPI serves sync routes from a threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": 300, "pool_size": 5, "max_overflow": 10}


engine = create_engine(settings.DATABASE_URL, echo=settings.DEBUG, **engine_options(settings.DATABASE_URL))


def create_db_and_tables(bind=None) -> None:
    from . import models  # noqa: F401  registers every table
    SQLModel.metadata.create_all(bind or engine)


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session
