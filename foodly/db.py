import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()
DATABASE_URL = f"sqlite:///{settings.database_path}"


def make_engine(url: str, timeout: float = 5.0) -> Engine:
    # check_same_thread=False lets FastAPI's threadpool share the pool;
    # timeout bounds how long a statement waits on a locked database
    return create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": timeout},
        future=True,
    )


engine = make_engine(DATABASE_URL, settings.db_timeout)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)
Base = declarative_base()


def init_db(bind: Engine) -> None:
    """Create the users, orders and cart_history tables when they are absent.

    Existing tables are left exactly as they are, so this is safe to call on
    every startup and against databases written by older deployments.
    """
    from . import models  # noqa: F401  registers the tables on Base.metadata

    Base.metadata.create_all(bind=bind, checkfirst=True)
    logger.info("Database tables created/verified: %s", ", ".join(sorted(Base.metadata.tables)))
