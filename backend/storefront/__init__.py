"""Storefront directory subsystem: category sync, directory read-model and promotions."""
__version__ = "0.1.0"
