"""
Общее ядро (Shared Kernel) системы бронирования площадок.

Содержит общие типы данных, исключения и утилиты,
используемые в различных ограниченных контекстах.
"""

from .domain import (
    AlreadyCancelledError,
    AuthzError,
    # Перечисления
    BookingStatus,
    CancelledBy,
    ConflictError,
    DomainEvent,
    # Исключения
    DomainException,
    # Базовые типы
    EntityId,
    NotFoundError,
    StorageError,
    ValidationError,
    VenueNotFoundError,
    generate_id,
    # Утилиты
    now,
    today,
)

__all__ = [
    # Базовые типы
    "EntityId",
    "generate_id",
    "DomainEvent",
    # Перечисления
    "BookingStatus",
    "CancelledBy",
    # Исключения
    "DomainException",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "AlreadyCancelledError",
    "AuthzError",
    "StorageError",
    "VenueNotFoundError",
    # Утилиты
    "now",
    "today",
]
