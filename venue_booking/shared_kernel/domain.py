"""
Основные доменные типы и утилиты общего ядра.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

# Общие типы идентификаторов
EntityId = UUID


def generate_id() -> UUID:
    """Генерирует новый UUID."""
    return uuid4()


class DomainEvent(BaseModel):
    """Базовый класс для всех доменных событий."""

    model_config = ConfigDict(frozen=True)

    event_id: UUID = Field(default_factory=uuid4)
    occurred_on: datetime = Field(default_factory=lambda: now())


# Общие перечисления
class BookingStatus(str, Enum):
    """Статусы бронирования."""

    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class CancelledBy(str, Enum):
    """Кто инициирует отмену бронирования."""

    USER = "user"
    ADMIN = "admin"


# Общие исключения
class DomainException(Exception):
    """Базовое исключение для доменных ошибок."""

    pass


class ValidationError(DomainException):
    """Некорректные или отсутствующие входные данные.

    ``errors`` содержит сообщения по каждому полю запроса.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        details = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(f"Некорректные данные бронирования ({details})")

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls({field: message})


class ConflictError(DomainException):
    """Запрошенные слоты уже заняты подтвержденными бронированиями."""

    def __init__(self, conflicts: Iterable[str]):
        self.conflicts: List[str] = sorted(conflicts)
        super().__init__(f"Слоты уже забронированы: {', '.join(self.conflicts)}")


class NotFoundError(DomainException):
    """Бронирование с указанным идентификатором не найдено."""

    def __init__(self, booking_id: EntityId):
        self.booking_id = booking_id
        super().__init__(f"Бронирование {booking_id} не найдено")


class AlreadyCancelledError(DomainException):
    """Повторная отмена уже отмененного бронирования."""

    def __init__(self, booking_id: EntityId):
        self.booking_id = booking_id
        super().__init__(f"Бронирование {booking_id} уже отменено")


class AuthzError(DomainException):
    """Данные для подтверждения личности не совпадают с бронированием."""

    pass


class StorageError(DomainException):
    """Ошибка записи или чтения постоянного хранилища."""

    pass


class VenueNotFoundError(DomainException):
    """Площадка отсутствует в реестре (ошибка конфигурации)."""

    def __init__(self, venue_id: str, message: Optional[str] = None):
        self.venue_id = venue_id
        super().__init__(message or f"Площадка {venue_id} не найдена")


# Общие утилиты
def now() -> datetime:
    """Возвращает текущую дату и время (UTC)."""
    return datetime.now(timezone.utc)


def today() -> date:
    """Возвращает текущую дату по UTC, по тем же часам, что и now()."""
    return now().date()
