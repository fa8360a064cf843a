"""Shared test fixtures - async SQLite per test, fake text generator for chat turns."""

import asyncio
import os

# Keep the app's default engine off the filesystem during tests.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from gm_assistant.core.turn_lock import LocalTurnLocks  # noqa: E402
from gm_assistant.db.database import Base, get_db  # noqa: E402
from gm_assistant.models.area import Area  # noqa: E402
from gm_assistant.models.npc import NPC  # noqa: E402
from gm_assistant.services.chat_service import ChatService  # noqa: E402

# Every summarization prompt contains this heading (see data/prompts/npc_chat.yaml)
SUMMARY_MARKER = "NEUE NACHRICHTEN ZUM ZUSAMMENFASSEN"


class FakeLLM:
    """Scriptable stand-in for the LLM service.

    Replies and summaries are recorded separately so tests can count
    compaction calls. Set ``reply_error`` / ``summary_error`` to make the
    respective call raise.
    """

    def __init__(self, reply: str = "Elira: Grüße, Reisender.", summary: str = "Der Spieler hat Elira begrüßt."):
        self.is_configured = True
        self.reply = reply
        self.summary = summary
        self.reply_error: Exception | None = None
        self.summary_error: Exception | None = None
        self.delay = 0.0
        self.reply_prompts: list[str] = []
        self.summary_prompts: list[str] = []

    async def generate(self, prompt: str, **params) -> str:
        if self.delay:
            await asyncio.sleep(self.delay)
        if SUMMARY_MARKER in prompt:
            self.summary_prompts.append(prompt)
            if self.summary_error:
                raise self.summary_error
            return self.summary
        self.reply_prompts.append(prompt)
        if self.reply_error:
            raise self.reply_error
        return self.reply


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite file per test with all tables created."""
    # Import all models so Base.metadata knows about them
    import gm_assistant.models  # noqa: F401

    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    """Direct async DB session for service-level tests."""
    async with session_factory() as session:
        yield session
        await session.commit()


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def chat_service(fake_llm, session_factory):
    return ChatService(fake_llm, session_factory=session_factory, locks=LocalTurnLocks())


@pytest.fixture
async def elira(db):
    """An NPC in the forest with no conversation yet (committed)."""
    db.add(Area(id="forest", name="Wald", icon="🌲"))
    npc = NPC(
        id="npc-elira",
        name="Elira",
        area="forest",
        role="Kräuterhändlerin",
        personality="Freundlich, aber misstrauisch gegenüber Fremden",
        appearance="Grauer Umhang, Korb voller Kräuter",
        motivations="Will ihre verschwundene Schwester finden",
        danger_level="harmlos",
        combat_notes="",
    )
    db.add(npc)
    await db.commit()
    return npc


@pytest.fixture
async def client(session_factory, chat_service):
    """Async HTTP test client with test DB and chat service overrides."""
    from gm_assistant.api.routes.chat import get_chat_service
    from gm_assistant.main import app

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_chat_service] = lambda: chat_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
