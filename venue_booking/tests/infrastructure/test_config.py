import logging
from pathlib import Path

import pytest

from venue_booking.booking.domain import BookingCreated
from venue_booking.booking.infrastructure import InMemoryEventBus, StdLibLogger
from venue_booking.bootstrap import bootstrap_app
from venue_booking.config import Settings


def test_defaults_keep_everything_in_memory():
    settings = Settings()

    assert settings.storage_dir is None
    assert settings.bookings_path is None
    assert settings.audit_path is None
    assert settings.log_level == "INFO"


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("VENUE_BOOKING_STORAGE_DIR", str(tmp_path))
    monkeypatch.setenv("VENUE_BOOKING_BOOKINGS_FILE", "data.json")
    monkeypatch.setenv("VENUE_BOOKING_LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.bookings_path == tmp_path / "data.json"
    assert settings.audit_path == Path(tmp_path) / "audit_log.json"
    assert settings.log_level == "DEBUG"


def test_unknown_log_level_is_rejected():
    with pytest.raises(ValueError):
        Settings(log_level="LOUD")


def test_bootstrap_with_default_venues():
    app = bootstrap_app(settings=Settings())

    assert [v.id for v in app["venues"].list_venues()] == ["guting-practice"]


def test_logger_renders_context(caplog):
    logger = StdLibLogger("venue_booking.test")

    with caplog.at_level(logging.INFO, logger="venue_booking.test"):
        logger.info("Booking created", venue_id="V", slots=["09:00-09:30"])

    assert 'Booking created | context={"venue_id": "V", "slots": ["09:00-09:30"]}' in caplog.text


def test_event_bus_isolates_failing_handlers(caplog):
    """Тест: сбой одного обработчика не мешает остальным."""
    bus = InMemoryEventBus(StdLibLogger("venue_booking.test"))
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(BookingCreated, broken)
    bus.subscribe(BookingCreated, received.append)
    event = BookingCreated(
        booking_id="6f1c2a0e-3b1d-4c55-9a61-2f4b8f0e7d11",
        venue_id="V",
        booking_date="2025-06-01",
        time_slots=["09:00-09:30"],
        name="Alice",
        email="a@x.com",
        phone="0912345678",
        company="SS Peaks",
        purpose="Recording",
        confirmation_code="abc123xyz0",
    )

    with caplog.at_level(logging.ERROR, logger="venue_booking.test"):
        bus.publish(event)

    assert received == [event]
    assert "boom" in caplog.text


def test_event_bus_required_handler_error_propagates(caplog):
    bus = InMemoryEventBus(StdLibLogger("venue_booking.test"))
    received = []

    def broken(event):
        raise RuntimeError("audit down")

    bus.subscribe(BookingCreated, broken, required=True)
    bus.subscribe(BookingCreated, received.append)
    event = BookingCreated(
        booking_id="6f1c2a0e-3b1d-4c55-9a61-2f4b8f0e7d11",
        venue_id="V",
        booking_date="2025-06-01",
        time_slots=["09:00-09:30"],
        name="Alice",
        email="a@x.com",
        phone="0912345678",
        company="SS Peaks",
        purpose="Recording",
        confirmation_code="abc123xyz0",
    )

    with caplog.at_level(logging.ERROR, logger="venue_booking.test"):
        with pytest.raises(RuntimeError, match="audit down"):
            bus.publish(event)

    assert received == []
    assert "Required event handler failed for BookingCreated" in caplog.text
