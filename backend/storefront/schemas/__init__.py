"""
Pydantic schemas for serializing directory data.
"""
from storefront.schemas.directory import (
    CamelModel,
    CategoryStatsResponse,
    DirectoryEntryResponse,
    DirectorySnapshotResponse,
    FailedOperationResponse,
    PromoteRequest,
    PromotionStatusResponse,
    ReconcileResultResponse,
)

__all__ = [
    "CamelModel",
    "CategoryStatsResponse",
    "DirectoryEntryResponse",
    "DirectorySnapshotResponse",
    "FailedOperationResponse",
    "PromoteRequest",
    "PromotionStatusResponse",
    "ReconcileResultResponse",
]
