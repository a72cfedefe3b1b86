"""Persistence adapters behind a single storage interface."""

from .base import EntityStore, Filter, Storage, StoreQuery

__all__ = ["EntityStore", "Filter", "Storage", "StoreQuery"]
