"""
Интерфейсы (порты) для контекста бронирования.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, List, Protocol, Type, TypeVar

from ..shared_kernel import DomainEvent, EntityId
from .domain import Booking

T_Event = TypeVar("T_Event", bound=DomainEvent)


class ILogger(Protocol):
    """Интерфейс для логгера."""

    def info(self, message: str, **kwargs: Any) -> None: ...
    def error(self, message: str, **kwargs: Any) -> None: ...
    def warning(self, message: str, **kwargs: Any) -> None: ...
    def debug(self, message: str, **kwargs: Any) -> None: ...


class IEventBus(Protocol):
    """Интерфейс для шины событий."""

    def publish(self, event: DomainEvent) -> None: ...
    def subscribe(
        self,
        event_type: Type[T_Event],
        handler: Callable[[T_Event], None],
        required: bool = False,
    ) -> None: ...


class IBookingRepository(Protocol):
    """Интерфейс репозитория для бронирований.

    Изменения (add/update) накапливаются до flush(); list_committed()
    возвращает только сохраненное состояние.
    """

    def add(self, booking: Booking) -> None: ...
    def update(self, booking: Booking) -> None: ...
    def get_by_id(self, booking_id: EntityId) -> Booking: ...
    def find_by_venue_and_date(self, venue_id: str, booking_date: date) -> List[Booking]: ...
    def list_committed(self) -> List[Booking]: ...
    def pending(self) -> List[Booking]: ...
    def flush(self) -> None: ...
    def discard(self) -> None: ...
    def restore(self, bookings: List[Booking]) -> None: ...


class IBookingUnitOfWork(Protocol):
    """Интерфейс Unit of Work для контекста Booking."""

    @property
    def bookings(self) -> IBookingRepository: ...
    @property
    def event_bus(self) -> IEventBus: ...

    def __enter__(self) -> IBookingUnitOfWork: ...
    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
