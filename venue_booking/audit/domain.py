"""
Доменная модель контекста журнала операций.

Записи журнала неизменяемы и содержат снимок данных
бронирования на момент операции.
"""

from datetime import datetime
from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

from ..shared_kernel import EntityId, generate_id, now

NOT_PROVIDED = "не указана"


class AuditOperation(str, Enum):
    """Вид операции в журнале."""

    CREATE = "create"
    CANCEL = "cancel"


class AuditEntry(BaseModel):
    """Запись журнала операций."""

    model_config = ConfigDict(frozen=True)

    id: EntityId = Field(default_factory=generate_id)
    timestamp: datetime = Field(default_factory=now)
    operation: AuditOperation
    details: Dict[str, str]

    @classmethod
    def booking_created(
        cls,
        name: str,
        company: str,
        venue_id: str,
        booking_date: str,
        time_slots: str,
        phone: str,
        email: str,
        confirmation_code: str,
    ) -> "AuditEntry":
        return cls(
            operation=AuditOperation.CREATE,
            details={
                "Бронирующий": name,
                "Компания": company,
                "Площадка": venue_id,
                "Дата": booking_date,
                "Слоты": time_slots,
                "Телефон": phone,
                "Email": email,
                "Код подтверждения": confirmation_code,
            },
        )

    @classmethod
    def booking_cancelled(
        cls,
        name: str,
        cancelled_by: str,
        booking_date: str,
        time_slots: str,
        reason: str = NOT_PROVIDED,
    ) -> "AuditEntry":
        return cls(
            operation=AuditOperation.CANCEL,
            details={
                "Бронирующий": name,
                "Отменил": cancelled_by,
                "Исходная дата": booking_date,
                "Исходные слоты": time_slots,
                "Причина отмены": reason,
            },
        )
