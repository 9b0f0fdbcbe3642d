"""Directory read-model: snapshot types, row sources and the materializer."""
from storefront.services.directory.materializer import (
    DirectoryMaterializer,
    is_listable,
)
from storefront.services.directory.snapshot import (
    CategoryStats,
    DirectoryEntry,
    DirectorySnapshot,
)
from storefront.services.directory.source import (
    DirectorySource,
    DirectorySourceRow,
    SqlDirectorySource,
    StaticDirectorySource,
)

__all__ = [
    "DirectoryMaterializer",
    "is_listable",
    "CategoryStats",
    "DirectoryEntry",
    "DirectorySnapshot",
    "DirectorySource",
    "DirectorySourceRow",
    "SqlDirectorySource",
    "StaticDirectorySource",
]
