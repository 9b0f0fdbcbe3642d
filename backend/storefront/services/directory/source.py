"""
Source rows for the directory materializer.

The materializer only depends on the DirectorySource protocol, so tests
can feed it plain rows while production reads through SQLAlchemy.
"""
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from sqlalchemy.ext.asyncio import async_sessionmaker

from storefront.db.transaction import read_only
from storefront.repositories.directory_repo import DirectoryRepository


@dataclass(frozen=True)
class DirectorySourceRow:
    """One (tenant, category) candidate with its listing flags."""
    tenant_id: int
    store_name: str
    store_slug: str
    sync_enabled: bool
    last_sync_at: Optional[datetime]
    directory_visible: bool
    location_status: str
    category_id: int
    category_slug: str
    category_name: str
    product_count: int
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    last_product_update: Optional[datetime] = None
    is_promoted: Optional[bool] = None
    promotion_tier: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "DirectorySourceRow":
        names = {f.name for f in fields(cls)}
        return cls(**{key: row[key] for key in row.keys() if key in names})


class DirectorySource(Protocol):
    async def fetch_rows(self) -> Sequence[DirectorySourceRow]:
        ...


class SqlDirectorySource:
    """Reads candidate rows in a short read-only transaction."""

    def __init__(self, session_maker: async_sessionmaker):
        self.session_maker = session_maker

    async def fetch_rows(self) -> list[DirectorySourceRow]:
        async with read_only(self.session_maker) as db:
            rows = await DirectoryRepository(db).fetch_listing_rows()
            return [DirectorySourceRow.from_mapping(row) for row in rows]


class StaticDirectorySource:
    """Fixed rows, for tests and local tooling."""

    def __init__(self, rows: Sequence[DirectorySourceRow] = ()):
        self.rows = list(rows)
        self.fetch_count = 0

    async def fetch_rows(self) -> list[DirectorySourceRow]:
        self.fetch_count += 1
        return list(self.rows)
