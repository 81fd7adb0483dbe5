"""
Интерфейсы (порты) для контекста журнала операций.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol

from .domain import AuditEntry

if TYPE_CHECKING:
    from ..booking.domain import BookingCancelled, BookingCreated


class IAuditLog(Protocol):
    """Интерфейс журнала операций (только добавление и полная выгрузка)."""

    def append(self, entry: AuditEntry) -> None: ...
    def list_all(self) -> List[AuditEntry]: ...


class IAuditService(Protocol):
    """Интерфейс сервиса для контекста Audit."""

    def record_booking_created(self, event: "BookingCreated") -> AuditEntry: ...
    def record_booking_cancelled(self, event: "BookingCancelled") -> AuditEntry: ...
