"""User library (saved games + profiles) adapters."""

from src.providers.library.sqlite_library_provider import SQLiteLibraryProvider

__all__ = ["SQLiteLibraryProvider"]
