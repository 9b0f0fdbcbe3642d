"""
Database module containing the declarative base and transaction helpers.
"""
from storefront.db.base import Base
from storefront.db.transaction import atomic, read_only

__all__ = ["Base", "atomic", "read_only"]
