"""
Общие фикстуры для тестов движка бронирования.
"""
from datetime import date
from typing import Any, Callable, Dict

import pytest

from venue_booking.bootstrap import bootstrap_app
from venue_booking.config import Settings
from venue_booking.venues.domain import VenueConfig
from venue_booking.venues.infrastructure import StaticVenueRegistry

BOOKING_DATE = date(2025, 6, 1)


@pytest.fixture
def studio() -> VenueConfig:
    """Площадка без ограничения окна бронирования."""
    return VenueConfig(
        id="V",
        name="Studio V",
        max_slots=4,
        companies=["SS Peaks", "Other"],
        purposes=["Recording", "Meeting"],
    )


@pytest.fixture
def restricted_studio() -> VenueConfig:
    return VenueConfig(
        id="R",
        name="Restricted Studio",
        admin_only=True,
        max_slots=2,
        companies=["SS Peaks"],
        purposes=["Recording"],
    )


@pytest.fixture
def venue_registry(studio, restricted_studio) -> StaticVenueRegistry:
    return StaticVenueRegistry([studio, restricted_studio])


@pytest.fixture
def app(venue_registry) -> Dict[str, Any]:
    """Полностью собранное приложение с хранением в памяти."""
    return bootstrap_app(settings=Settings(), venues=venue_registry)


@pytest.fixture
def booking_service(app):
    return app["booking_service"]


@pytest.fixture
def audit_service(app):
    return app["audit_service"]


@pytest.fixture
def make_draft() -> Callable[..., Dict[str, Any]]:
    """Фабрика корректных черновиков бронирования."""

    def _make(**overrides: Any) -> Dict[str, Any]:
        draft = {
            "venue_id": "V",
            "date": BOOKING_DATE,
            "time_slots": ["09:00-09:30", "09:30-10:00"],
            "name": "Alice",
            "email": "a@x.com",
            "phone": "0912345678",
            "company": "SS Peaks",
            "purpose": "Recording",
            "notes": None,
        }
        draft.update(overrides)
        return draft

    return _make
