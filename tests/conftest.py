import itertools
from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from werkzeug.security import generate_password_hash

from duelvault.db.database import get_session
from duelvault.main import app
from duelvault.models.db import Base, CardDB, PrintingDB, UserDB
from duelvault.models.enums import UserTier
from duelvault.services.auth import issue_token


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session: AsyncSession) -> Callable[..., Awaitable[UserDB]]:
    """Factory for users with the password "secret123"."""

    async def _make(username: str = "yugi", tier: UserTier = UserTier.FREE) -> UserDB:
        user = UserDB(
            email=f"{username}@example.com",
            username=username,
            password_hash=generate_password_hash("secret123"),
            tier=tier,
        )
        session.add(user)
        await session.flush()
        return user

    return _make


@pytest.fixture
def make_card(session: AsyncSession) -> Callable[..., Awaitable[CardDB]]:
    """Factory for catalog cards with unique Konami ids."""
    konami_ids = itertools.count(10000)

    async def _make(name: str | None = None, **fields: Any) -> CardDB:
        konami_id = fields.pop("konami_id", None) or next(konami_ids)
        name = name or f"Card {konami_id}"
        values: dict[str, Any] = {
            "name": name,
            "name_en": name,
            "name_de": name,
            "type": "Normal Monster",
            "frame_type": "normal",
            "description": "",
        }
        values.update(fields)
        card = CardDB(konami_id=konami_id, **values)
        session.add(card)
        await session.flush()
        return card

    return _make


@pytest.fixture
def make_printing(
    session: AsyncSession, make_card: Callable[..., Awaitable[CardDB]]
) -> Callable[..., Awaitable[PrintingDB]]:
    """Factory for printings; creates a card unless one is given."""

    async def _make(
        set_code: str,
        price: float | None = None,
        card: CardDB | None = None,
        rarity: str = "Common",
        set_name: str = "Legend of Blue Eyes White Dragon",
        **card_fields: Any,
    ) -> PrintingDB:
        if card is None:
            card = await make_card(**card_fields)
        printing = PrintingDB(
            card_id=card.id,
            set_code=set_code,
            set_name=set_name,
            rarity=rarity,
            price=price,
        )
        session.add(printing)
        await session.flush()
        return printing

    return _make


@pytest.fixture
async def client(session_factory):
    """Provide an async test client with overridden database session."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def auth_headers(session: AsyncSession, make_user) -> dict[str, str]:
    """Bearer headers for a committed FREE user named "yugi"."""
    user = await make_user()
    await session.commit()
    return {"Authorization": f"Bearer {issue_token(user.id)}"}
