"""
Repository Layer Package

This package contains repository classes that encapsulate all database access.
Repositories provide a clean abstraction over the database, making the code
more testable and maintainable.

Key Components:
- BaseRepository: Foundation class with read_df()/fetch_one()/write() and schema recovery
- ShopSettingsRepository: Stored market configs, fingerprints and URL conversion toggles
"""

from repositories.base import BaseRepository
from repositories.shop_settings_repo import (
    ShopSettingsRepository,
    get_shop_settings_repository,
)

__all__ = [
    "BaseRepository",
    "ShopSettingsRepository",
    "get_shop_settings_repository",
]
