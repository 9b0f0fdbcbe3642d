"""
Pytest configuration and fixtures.

Provides fixtures for:
- In-memory database engine, session maker and session
- Tenant/listing factories for directory and promotion tests
- Deterministic category providers
"""
import itertools
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storefront.db.base import Base
from storefront.models import (
    InventoryItem,
    ItemStatus,
    ItemVisibility,
    LocationStatus,
    Tenant,
    TenantBusinessProfile,
    TenantCategory,
)
from storefront.services.categories import InMemoryCategoryProvider

# Use SQLite for testing; StaticPool keeps one connection so every session
# sees the same in-memory database.
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine) -> async_sessionmaker:
    """Session factory bound to the test engine, as services receive it."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for clock-dependent tests."""
    return NOW


@pytest.fixture
def memory_provider() -> InMemoryCategoryProvider:
    """In-memory category provider with sequential ids."""
    ids = itertools.count(1)
    return InMemoryCategoryProvider(id_generator=lambda: f"cat-{next(ids)}")


# -----------------------------------------------------------------------------
# Listing Fixtures
# -----------------------------------------------------------------------------

async def create_listing(
    db: AsyncSession,
    *,
    name: str = "Corner Books",
    slug: str | None = None,
    sync_enabled: bool = True,
    last_sync_at: datetime | None = NOW - timedelta(hours=1),
    directory_visible: bool = True,
    location_status: str = LocationStatus.ACTIVE.value,
    categories: dict[str, str] | None = None,
    items_per_category: int = 2,
    item_status: str = ItemStatus.ACTIVE.value,
    visibility: str = ItemVisibility.PUBLIC.value,
) -> Tenant:
    """
    Create a tenant with a business profile, categories and inventory.

    ``categories`` maps slug to display name; every category gets
    ``items_per_category`` items with the given status and visibility.
    """
    tenant = Tenant(
        name=name,
        slug=slug or name.lower().replace(" ", "-"),
        sync_enabled=sync_enabled,
        last_sync_at=last_sync_at,
        directory_visible=directory_visible,
        location_status=location_status,
    )
    db.add(tenant)
    await db.flush()

    db.add(
        TenantBusinessProfile(
            tenant_id=tenant.id,
            latitude=47.61,
            longitude=-122.33,
            address_line1="100 Pine St",
            city="Seattle",
            state="WA",
            postal_code="98101",
        )
    )

    for sort_order, (category_slug, category_name) in enumerate(
        (categories or {"books": "Books"}).items()
    ):
        category = TenantCategory(
            tenant_id=tenant.id,
            slug=category_slug,
            name=category_name,
            sort_order=sort_order,
        )
        db.add(category)
        await db.flush()
        for n in range(items_per_category):
            db.add(
                InventoryItem(
                    tenant_id=tenant.id,
                    category_id=category.id,
                    name=f"{category_name} item {n}",
                    item_status=item_status,
                    visibility=visibility,
                )
            )

    await db.commit()
    return tenant


@pytest_asyncio.fixture
async def listing(db_session) -> Tenant:
    """A tenant that satisfies every directory condition."""
    return await create_listing(db_session)


@pytest.fixture
def listing_factory(db_session):
    """Create listings with ``create_listing`` keyword overrides."""
    async def factory(**kwargs) -> Tenant:
        return await create_listing(db_session, **kwargs)
    return factory
