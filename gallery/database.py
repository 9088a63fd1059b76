from sqlmodel import SQLModel, create_engine
from sqlalchemy.engine import Engine
import logging

logger = logging.getLogger(__name__)


def build_engine(db_url: str, echo: bool = False) -> Engine:
    # Choose engine options based on database scheme
    engine_kwargs = {}
    if db_url.startswith("sqlite"):
        engine_kwargs.update({
            "connect_args": {"check_same_thread": False}
        })
    else:
        # Better resiliency for managed Postgres
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 300,
            "pool_size": 5,
            "max_overflow": 10,
        })
    return create_engine(db_url, echo=echo, **engine_kwargs)


def create_db_and_tables(engine: Engine):
    # Register table models on the metadata before create_all
    from .db.models import ImageRecord  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables ensured")
