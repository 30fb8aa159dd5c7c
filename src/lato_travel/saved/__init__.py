"""Saved tours and companies, cached across sessions."""
from lato_travel.saved.cache import (SAVED_COMPANIES_DATA_KEY,
                                     SAVED_COMPANIES_KEY, SAVED_TOURS_DATA_KEY,
                                     SAVED_TOURS_KEY, SavedItemsCache,
                                     saved_companies_cache, saved_tours_cache)
from lato_travel.saved.models import SavedItemRecord

__all__ = [
    "SAVED_COMPANIES_DATA_KEY",
    "SAVED_COMPANIES_KEY",
    "SAVED_TOURS_DATA_KEY",
    "SAVED_TOURS_KEY",
    "SavedItemRecord",
    "SavedItemsCache",
    "saved_companies_cache",
    "saved_tours_cache",
]
