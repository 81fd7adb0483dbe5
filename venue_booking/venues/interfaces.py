"""
Интерфейсы (порты) для контекста площадок.
"""

from __future__ import annotations

from typing import List, Protocol

from .domain import VenueConfig


class IVenueRegistry(Protocol):
    """Интерфейс реестра площадок."""

    def get(self, venue_id: str) -> VenueConfig: ...
    def exists(self, venue_id: str) -> bool: ...
    def list_venues(self, include_admin_only: bool = False) -> List[VenueConfig]: ...
