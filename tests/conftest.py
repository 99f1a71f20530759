import os
import tempfile
from pathlib import Path

# Point the app at a throwaway database before backend.config is imported.
_TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="echolearn-tests-"))
os.environ.setdefault("ECHOLEARN_DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_DB_DIR / 'test.db'}")
os.environ.setdefault("ECHOLEARN_VOICE_ENABLED", "false")

import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from backend.models import Base  # noqa: E402
from backend.store import SessionStore  # noqa: E402


@pytest_asyncio.fixture
async def store(tmp_path: Path):
    """A SessionStore backed by a fresh SQLite file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield SessionStore(async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))
    await engine.dispose()
