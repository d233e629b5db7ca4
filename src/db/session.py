import os
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker


DATABASE_URL = os.getenv("DATABASE_URL")
if DATABASE_URL is None:
    raise ValueError("DATABASE_URL environment variable not set")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"


def to_async_url(url: str) -> str:
    """Map a sync database URL onto its async driver."""
    if url.startswith("sqlite"):
        return url.replace("sqlite", "sqlite+aiosqlite", 1)
    return url.replace("postgresql", "postgresql+asyncpg", 1)


ASYNC_DATABASE_URL = to_async_url(DATABASE_URL)

engine = create_engine(DATABASE_URL, echo=SQL_ECHO)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

async_engine = create_async_engine(ASYNC_DATABASE_URL, echo=SQL_ECHO)
AsyncSessionLocal = sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_async_db():
    """FastAPI dependency that yields one session per request."""
    async with AsyncSessionLocal() as session:
        yield session
