import json
from datetime import date

import pytest

from venue_booking.audit.domain import AuditEntry, AuditOperation
from venue_booking.audit.infrastructure import JsonFileAuditLog
from venue_booking.booking.domain import Booking
from venue_booking.booking.infrastructure import (
    JsonFileBookingRepository,
    read_json_list,
    write_json_atomic,
)
from venue_booking.bootstrap import bootstrap_app
from venue_booking.config import Settings
from venue_booking.shared_kernel import BookingStatus, CancelledBy, NotFoundError, StorageError


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(storage_dir=tmp_path)


def make_booking(slots=("09:00-09:30",)) -> Booking:
    return Booking.create(
        venue_id="V",
        booking_date=date(2025, 6, 1),
        time_slots=list(slots),
        name="Alice",
        email="a@x.com",
        phone="0912345678",
        company="SS Peaks",
        purpose="Recording",
    )


def test_write_json_atomic_replaces_file(tmp_path):
    path = tmp_path / "nested" / "data.json"

    write_json_atomic(path, [{"a": 1}])
    write_json_atomic(path, [{"b": "Тест"}])

    assert json.loads(path.read_text(encoding="utf-8")) == [{"b": "Тест"}]
    assert [p.name for p in path.parent.iterdir()] == ["data.json"]


def test_read_json_list_of_missing_or_empty_file(tmp_path):
    path = tmp_path / "data.json"
    assert read_json_list(path) == []

    path.write_text("  \n", encoding="utf-8")
    assert read_json_list(path) == []


def test_read_json_list_rejects_non_list(tmp_path):
    path = tmp_path / "data.json"
    path.write_text('{"a": 1}', encoding="utf-8")

    with pytest.raises(StorageError):
        read_json_list(path)


def test_repository_stages_changes_until_flush(tmp_path):
    """Тест: несохраненные изменения не видны читателям."""
    repo = JsonFileBookingRepository(tmp_path / "bookings.json")
    booking = make_booking()

    repo.add(booking)
    assert repo.list_committed() == []
    assert repo.get_by_id(booking.id) is booking

    repo.discard()
    with pytest.raises(NotFoundError):
        repo.get_by_id(booking.id)

    repo.add(booking)
    repo.flush()
    assert repo.list_committed() == [booking]
    assert repo.pending() == []


def test_repository_round_trip_preserves_cancellation(tmp_path):
    path = tmp_path / "bookings.json"
    repo = JsonFileBookingRepository(path)
    booking = make_booking(["09:00-09:30", "09:30-10:00"])
    repo.add(booking)
    repo.flush()
    cancelled = booking.model_copy(deep=True)
    cancelled.cancel(CancelledBy.USER, "Заболел")
    repo.update(cancelled)
    repo.flush()

    loaded = JsonFileBookingRepository(path).get_by_id(booking.id)

    assert loaded.status == BookingStatus.CANCELLED
    assert loaded.cancelled_by == CancelledBy.USER
    assert loaded.cancel_reason == "Заболел"
    assert loaded.cancelled_at == cancelled.cancelled_at
    assert loaded.time_slots == ["09:00-09:30", "09:30-10:00"]
    assert loaded.confirmation_code == booking.confirmation_code


def test_corrupted_file_is_storage_error(tmp_path):
    path = tmp_path / "bookings.json"
    path.write_text("[{", encoding="utf-8")

    with pytest.raises(StorageError):
        JsonFileBookingRepository(path)


def test_bookings_survive_restart(settings, venue_registry, make_draft):
    """Тест: после перезапуска движок видит те же бронирования и занятость."""
    app = bootstrap_app(settings=settings, venues=venue_registry)
    service = app["booking_service"]
    kept = service.create_booking(make_draft())
    cancelled = service.create_booking(make_draft(time_slots=["12:00-12:30"]))
    service.cancel_booking(cancelled.id, CancelledBy.ADMIN, reason="Дубликат")

    restarted = bootstrap_app(settings=settings, venues=venue_registry)
    restored = restarted["booking_service"]

    assert restored.get_booking(kept.id) == kept
    assert restored.get_booking(cancelled.id).cancel_reason == "Дубликат"
    assert restored.check_availability("V", kept.date) == set(kept.time_slots)
    assert len(restarted["audit_service"].list_entries()) == 3


def test_failed_write_leaves_state_unchanged(
    settings, venue_registry, make_draft, monkeypatch
):
    """Тест: ошибка записи на диск не меняет ни память, ни файл."""
    app = bootstrap_app(settings=settings, venues=venue_registry)
    service = app["booking_service"]
    existing = service.create_booking(make_draft())
    before = settings.bookings_path.read_bytes()
    entries_before = app["audit_service"].list_entries()

    def broken_write(path, data):
        raise OSError("disk full")

    monkeypatch.setattr("venue_booking.booking.infrastructure.write_json_atomic", broken_write)

    with pytest.raises(StorageError):
        service.create_booking(make_draft(time_slots=["12:00-12:30"]))
    with pytest.raises(StorageError):
        service.cancel_booking(existing.id, CancelledBy.ADMIN)

    assert [b.id for b in service.list_bookings()] == [existing.id]
    assert service.get_booking(existing.id).status == BookingStatus.CONFIRMED
    assert service.check_availability("V", existing.date) == set(existing.time_slots)
    assert settings.bookings_path.read_bytes() == before
    assert app["audit_service"].list_entries() == entries_before

    monkeypatch.undo()
    retried = service.create_booking(make_draft(time_slots=["12:00-12:30"]))
    assert retried.status == BookingStatus.CONFIRMED


def test_audit_log_persistence(tmp_path):
    path = tmp_path / "audit_log.json"
    log = JsonFileAuditLog(path)
    entry = AuditEntry.booking_cancelled(
        name="Alice",
        cancelled_by="администратор",
        booking_date="2025-06-01",
        time_slots="09:00-09:30",
    )

    log.append(entry)

    assert JsonFileAuditLog(path).list_all() == [entry]


def test_audit_log_write_failure(tmp_path, monkeypatch):
    path = tmp_path / "audit_log.json"
    log = JsonFileAuditLog(path)

    def broken_write(path, data):
        raise OSError("read-only")

    monkeypatch.setattr("venue_booking.audit.infrastructure.write_json_atomic", broken_write)

    with pytest.raises(StorageError):
        log.append(
            AuditEntry(operation=AuditOperation.CREATE, details={"Бронирующий": "Alice"})
        )

    assert log.list_all() == []
    assert not path.exists()


def test_audit_write_failure_reverts_booking_on_disk(
    settings, venue_registry, make_draft, monkeypatch
):
    """Тест: если журнал не записан, бронирование не остается ни в памяти, ни в файле."""
    app = bootstrap_app(settings=settings, venues=venue_registry)
    service = app["booking_service"]
    existing = service.create_booking(make_draft())
    before = settings.bookings_path.read_bytes()

    def broken_write(path, data):
        raise OSError("disk full")

    monkeypatch.setattr("venue_booking.audit.infrastructure.write_json_atomic", broken_write)

    with pytest.raises(StorageError):
        service.create_booking(make_draft(time_slots=["12:00-12:30"]))

    assert [b.id for b in service.list_bookings()] == [existing.id]
    assert settings.bookings_path.read_bytes() == before
    assert len(app["audit_service"].list_entries()) == 1

    restarted = bootstrap_app(settings=settings, venues=venue_registry)
    assert [b.id for b in restarted["booking_service"].list_bookings()] == [existing.id]


def test_flush_is_logged(tmp_path, caplog):
    repo = JsonFileBookingRepository(tmp_path / "bookings.json")
    repo.add(make_booking())

    with caplog.at_level("DEBUG", logger="venue_booking"):
        repo.flush()

    assert 'Bookings flushed | context={"total": 1}' in caplog.text
