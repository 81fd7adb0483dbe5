from ..booking.domain import BookingCancelled, BookingCreated
from .interfaces import IAuditService


def on_booking_created(event: BookingCreated, service: "IAuditService") -> None:
    """Обработчик события создания бронирования."""
    service.record_booking_created(event)


def on_booking_cancelled(event: BookingCancelled, service: "IAuditService") -> None:
    """Обработчик события отмены бронирования."""
    service.record_booking_cancelled(event)
