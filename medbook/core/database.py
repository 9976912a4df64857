from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator
import redis
from .config import settings

def _build_engine(url: str):
    """Create the SQLAlchemy engine, with pool settings for server databases."""
    if url.startswith("sqlite"):
        # SQLite connections are shared across the threadpool FastAPI uses
        return create_engine(url, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # Recycle connections after 30 minutes
    )

engine = _build_engine(settings.get_database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

_redis_client = None

# Database dependency
def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Redis dependency
def get_redis():
    """Get Redis client, created on first use."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _redis_client

# Database initialization
def init_db():
    """Initialize database tables."""
    # Register the models on Base.metadata before creating tables
    from ..models import appointment, user  # noqa: F401
    Base.metadata.create_all(bind=engine)
