from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.platform.config import settings
from app.platform.db.base import Base

engine_options = {"echo": False, "future": True}
if settings.DATABASE_URL.startswith("sqlite"):
    # One connection per session; aiosqlite connections are not shared across event loops
    engine_options["poolclass"] = NullPool
else:
    engine_options.update(
        pool_pre_ping=True,
        pool_recycle=1800,
        pool_size=20,
        max_overflow=30,
        pool_timeout=30,
    )

engine = create_async_engine(settings.DATABASE_URL, **engine_options)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False, autocommit=False)


async def get_db():
    async with SessionLocal() as session:
        yield session


async def init_db():
    """Create all tables. Models must be imported so they register on Base.metadata."""
    from app.features.scans.models.scan_record import ScanRecord  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
