"""테스트 인프라 — 인메모리 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite DB, session, and httpx client fixtures.
Each test gets a fresh schema; the app's get_db dependency is overridden
with the test session.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from catalog.database import Base, get_db
from catalog.main import app
from catalog.models import *  # noqa: F401,F403 — register all models with metadata
from catalog.models.catalog import Category, Service, normalize_category_name

# ---------------------------------------------------------------------------
# 테스트 DB 설정 — 외부 DB 없이 aiosqlite 인메모리 사용
# ---------------------------------------------------------------------------
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 매 테스트마다 스키마를 새로 생성합니다."""
    eng = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def make_category(db: AsyncSession) -> Callable[..., Awaitable[Category]]:
    """카테고리 생성 팩토리를 반환합니다."""
    async def _make(name: str, **fields) -> Category:
        category = Category(name=name, name_key=normalize_category_name(name), tags=[], **fields)
        db.add(category)
        await db.commit()
        await db.refresh(category)
        return category

    return _make


@pytest_asyncio.fixture
async def make_services(db: AsyncSession) -> Callable[..., Awaitable[list[Service]]]:
    """카테고리 아래 서비스 여러 개를 생성하는 팩토리를 반환합니다."""
    async def _make(category: Category, *titles: str) -> list[Service]:
        services = [
            Service(category_id=category.id, title=title, description=f"{title} description", tags=[])
            for title in titles
        ]
        db.add_all(services)
        await db.commit()
        for s in services:
            await db.refresh(s)
        return services

    return _make


@pytest_asyncio.fixture
async def plumbing(make_category, make_services) -> Category:
    """서비스 3개가 있는 테스트 카테고리."""
    category = await make_category("Plumbing", description="Pipes and drains")
    await make_services(category, "Leak repair", "Drain cleaning", "Boiler service")
    return category


@pytest_asyncio.fixture
async def empty_category(make_category) -> Category:
    """서비스가 없는 테스트 카테고리."""
    return await make_category("Gardening")
