from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from agency.core.config import settings
from agency.helpers.getters import isDebugMode
import logging
logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    # SQLite connections are shared with FastAPI's threadpool
    return {"check_same_thread": False} if url.startswith("sqlite") else {}


if isDebugMode():
    logger.info("Using EXTERNAL database URL for debug mode")
    DATABASE_URL = settings.POSTGRES_EXTERNAL_URL
    DATABASE_URL_SYNC = settings.POSTGRES_EXTERNAL_URL_SYNC
else:
    logger.info("Using INTERNAL database URL")
    DATABASE_URL = settings.POSTGRES_INTERNAL_URL
    DATABASE_URL_SYNC = settings.POSTGRES_INTERNAL_URL_SYNC

engine_internal = create_async_engine(
    DATABASE_URL, future=True, echo=False, connect_args=_connect_args(DATABASE_URL)
)
SessionAsync = sessionmaker(engine_internal, class_=AsyncSession, expire_on_commit=False)

engine_internal_sync = create_engine(
    DATABASE_URL_SYNC, pool_pre_ping=True, connect_args=_connect_args(DATABASE_URL_SYNC)
)
SessionSync = sessionmaker(bind=engine_internal_sync, expire_on_commit=False)
