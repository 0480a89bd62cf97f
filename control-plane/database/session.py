# control-plane/database/session.py
"""
Admission audit database session management
The audit store is optional; the webhook keeps answering if it is down
"""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator
import logging

from config import settings
from .models import Base

logger = logging.getLogger(__name__)


def build_engine(url: str) -> Engine:
    """
    Engine for the audit database

    SQLite (file or in-memory) shares one connection across the server's
    worker threads; other backends get a pre-pinged pool.
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.DEBUG,
        )

    return create_engine(
        url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        echo=settings.DEBUG,
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create the audit tables, called from the app lifespan"""
    if not settings.ENABLE_AUDIT_LOG:
        logger.info("Admission audit disabled, skip database initialization")
        return

    logger.info(f"Initializing admission audit database ({engine.url.get_backend_name()})")
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Audit session dependency for FastAPI
    Usage: db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class DatabaseManager:
    """Audit database health"""

    @staticmethod
    def check_connection() -> bool:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Audit database connection check failed: {e}")
            return False


db_manager = DatabaseManager()
