import logging
from functools import partial
from typing import Any, Dict, Optional

from .audit.application import AuditService
from .audit.event_handlers import on_booking_cancelled, on_booking_created
from .audit.infrastructure import InMemoryAuditLog, JsonFileAuditLog
from .booking.application import BookingApplicationService
from .booking.domain import BookingCancelled, BookingCreated, BookingPolicy
from .booking.infrastructure import (
    BookingUnitOfWork,
    InMemoryBookingRepository,
    JsonFileBookingRepository,
    StdLibLogger,
)
from .config import Settings
from .venues.infrastructure import JsonFileVenueRegistry, StaticVenueRegistry
from .venues.interfaces import IVenueRegistry

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT)


def bootstrap_app(
    settings: Optional[Settings] = None,
    venues: Optional[IVenueRegistry] = None,
    policy: Optional[BookingPolicy] = None,
) -> Dict[str, Any]:
    """Создает и настраивает все компоненты приложения."""
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    logger = StdLibLogger()

    # 1. Реестр площадок
    if venues is None:
        if settings.venues_file is not None:
            venues = JsonFileVenueRegistry(settings.venues_file)
        else:
            venues = StaticVenueRegistry.with_defaults()

    # 2. Хранилища бронирований и журнала
    if settings.storage_dir is not None:
        bookings_repo = JsonFileBookingRepository(settings.bookings_path, logger=logger)
        audit_log = JsonFileAuditLog(settings.audit_path)
    else:
        bookings_repo = InMemoryBookingRepository(logger=logger)
        audit_log = InMemoryAuditLog()

    booking_uow = BookingUnitOfWork(bookings_repo=bookings_repo, logger=logger)

    # 3. Создаем сервисы, передавая им зависимости
    audit_service = AuditService(audit_log, logger=logger)
    booking_service = BookingApplicationService(
        booking_uow, venues, policy=policy, logger=logger
    )

    # 4. Подписываем обработчики на события; запись в журнал входит в операцию
    booking_uow.event_bus.subscribe(
        BookingCreated, partial(on_booking_created, service=audit_service), required=True
    )
    booking_uow.event_bus.subscribe(
        BookingCancelled, partial(on_booking_cancelled, service=audit_service), required=True
    )

    logger.info(
        "Venue booking engine started",
        storage_dir=str(settings.storage_dir) if settings.storage_dir else None,
        bookings=len(bookings_repo.list_committed()),
    )

    # Возвращаем настроенные компоненты
    return {
        "settings": settings,
        "venues": venues,
        "booking_uow": booking_uow,
        "booking_service": booking_service,
        "audit_service": audit_service,
    }
