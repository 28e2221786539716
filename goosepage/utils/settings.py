"""Settings resolution utilities for Document configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from goosepage.paging.options import PagingOptions


def _pluralize(name: str) -> str:
    """Naive pluralization for collection names."""
    lower = name.lower()
    if lower.endswith("s"):
        return lower + "es"
    if lower.endswith("y") and not lower.endswith(("ay", "ey", "iy", "oy", "uy")):
        return lower[:-1] + "ies"
    return lower + "s"


class SettingsResolver:
    """Resolves document settings from inner Settings class."""

    @staticmethod
    def get_collection_name(cls: type) -> str:
        """Get collection name from Settings or auto-pluralize.

        Args:
            cls: Document class

        Returns:
            Collection name
        """
        settings = getattr(cls, "Settings", None)
        if settings and hasattr(settings, "collection"):
            return settings.collection
        return _pluralize(cls.__name__)

    @staticmethod
    def get_connection_alias(cls: type) -> str:
        settings = getattr(cls, "Settings", None)
        if settings and hasattr(settings, "connection_alias"):
            return settings.connection_alias
        return "default"

    @staticmethod
    def get_paging_options(cls: type) -> PagingOptions:
        """Get keyset paging configuration from Settings.paging.

        Settings.paging may be a PagingOptions instance or a dict of its
        fields. Invalid values raise InvalidPagination at class creation.

        Args:
            cls: Document class

        Returns:
            PagingOptions for this document class
        """
        from goosepage.paging.options import PagingOptions

        settings = getattr(cls, "Settings", None)
        paging = getattr(settings, "paging", None) if settings else None
        if paging is None:
            return PagingOptions()
        if isinstance(paging, PagingOptions):
            return paging
        return PagingOptions(**paging)
