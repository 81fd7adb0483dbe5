"""
Прикладной слой контекста журнала операций.
"""

from typing import List, Optional

from ..booking.domain import BookingCancelled, BookingCreated
from ..booking.infrastructure import StdLibLogger
from ..booking.interfaces import ILogger
from ..shared_kernel import CancelledBy
from .domain import NOT_PROVIDED, AuditEntry
from .interfaces import IAuditLog

CANCELLED_BY_LABELS = {
    CancelledBy.USER: "пользователь",
    CancelledBy.ADMIN: "администратор",
}


class AuditService:
    """Сервис приложения для ведения журнала операций."""

    def __init__(self, audit_log: IAuditLog, logger: Optional[ILogger] = None):
        self._audit_log = audit_log
        self._logger = logger or StdLibLogger()

    def record_booking_created(self, event: BookingCreated) -> AuditEntry:
        entry = AuditEntry.booking_created(
            name=event.name,
            company=event.company,
            venue_id=event.venue_id,
            booking_date=event.booking_date.isoformat(),
            time_slots=", ".join(event.time_slots),
            phone=event.phone,
            email=event.email,
            confirmation_code=event.confirmation_code,
        )
        self._audit_log.append(entry)
        self._logger.debug("Audit entry recorded", operation=entry.operation.value)
        return entry

    def record_booking_cancelled(self, event: BookingCancelled) -> AuditEntry:
        entry = AuditEntry.booking_cancelled(
            name=event.name,
            cancelled_by=CANCELLED_BY_LABELS[event.cancelled_by],
            booking_date=event.booking_date.isoformat(),
            time_slots=", ".join(event.time_slots),
            reason=event.reason or NOT_PROVIDED,
        )
        self._audit_log.append(entry)
        self._logger.debug("Audit entry recorded", operation=entry.operation.value)
        return entry

    def list_entries(self) -> List[AuditEntry]:
        """Полная выгрузка журнала в порядке записи."""
        return self._audit_log.list_all()
