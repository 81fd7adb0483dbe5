"""
Прикладной слой контекста бронирования.

Содержит сервис приложения, который координирует
реестр площадок, проверку конфликтов, хранилище и журнал операций.
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..shared_kernel import (
    BookingStatus,
    CancelledBy,
    EntityId,
    NotFoundError,
    ValidationError,
)
from ..venues.interfaces import IVenueRegistry
from ..venues.slots import generate_day_slots
from . import interfaces as ports
from .domain import Booking, BookingPolicy, BookingService, occupied_slots
from .infrastructure import StdLibLogger
from .reporting import (
    BookingFilter,
    BookingStats,
    bookings_to_csv,
    compute_stats,
    filter_bookings,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[0-9\-\s+()]{8,}$")

# DTO (Data Transfer Objects) для входящих данных


class CreateBookingRequest(BaseModel):
    """Запрос на создание бронирования."""

    venue_id: str
    date: date
    time_slots: List[str]
    name: str
    email: str
    phone: str
    company: str
    purpose: str
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Укажите имя")
        return v.strip()

    @field_validator("email")
    @classmethod
    def email_format(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Укажите email")
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Некорректный формат email")
        return v

    @field_validator("phone")
    @classmethod
    def phone_format(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Укажите телефон")
        if not PHONE_PATTERN.match(v):
            raise ValueError("Некорректный формат телефона")
        return v

    @field_validator("company", "purpose")
    @classmethod
    def category_selected(cls, v: str) -> str:
        if not v:
            raise ValueError("Выберите значение из списка")
        return v

    @field_validator("time_slots")
    @classmethod
    def slots_selected(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("Выберите хотя бы один слот")
        return v

    @classmethod
    def parse(cls, data: Union["CreateBookingRequest", Mapping[str, Any]]) -> "CreateBookingRequest":
        """Проверяет входные данные, преобразуя ошибки pydantic в ValidationError."""
        if isinstance(data, cls):
            return data
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(_field_errors(e)) from e


class CancelBookingRequest(BaseModel):
    """Запрос на отмену бронирования."""

    booking_id: EntityId
    actor: CancelledBy
    reason: Optional[str] = None
    claimed_email: Optional[str] = None
    claimed_phone: Optional[str] = None


def _parse_booking_id(booking_id: Union[EntityId, str]) -> EntityId:
    """Идентификатор, который нельзя разобрать, не может принадлежать бронированию."""
    if isinstance(booking_id, UUID):
        return booking_id
    try:
        return UUID(str(booking_id))
    except ValueError:
        raise NotFoundError(booking_id) from None


def _field_errors(error: PydanticValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for item in error.errors():
        field = ".".join(str(part) for part in item["loc"]) or "__root__"
        message = item["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors


# DTO для исходящих данных


class BookingDTO(BaseModel):
    """DTO для представления бронирования (только для чтения)."""

    model_config = ConfigDict(frozen=True)

    id: EntityId
    venue_id: str
    date: date
    time_slots: List[str]
    name: str
    email: str
    phone: str
    company: str
    purpose: str
    notes: Optional[str]
    status: BookingStatus
    confirmation_code: str
    created_at: datetime
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[CancelledBy] = None
    cancel_reason: Optional[str] = None

    @classmethod
    def from_domain(cls, booking: Booking) -> "BookingDTO":
        """Создает DTO из доменной модели."""
        return cls(**booking.model_dump())


class SlotStatus(str, Enum):
    AVAILABLE = "available"
    BOOKED = "booked"


class SlotAvailability(BaseModel):
    """Состояние одного слота в расписании дня."""

    model_config = ConfigDict(frozen=True)

    slot: str
    status: SlotStatus


# Сервисы приложения


class BookingApplicationService:
    """Сервис приложения для работы с бронированиями."""

    def __init__(
        self,
        uow: ports.IBookingUnitOfWork,
        venues: IVenueRegistry,
        policy: Optional[BookingPolicy] = None,
        logger: Optional[ports.ILogger] = None,
    ):
        """Инициализирует сервис."""
        self._uow = uow
        self._venues = venues
        self._booking_service = BookingService(self._uow.bookings, policy)
        self._logger = logger or StdLibLogger()

    def create_booking(
        self, draft: Union[CreateBookingRequest, Mapping[str, Any]]
    ) -> BookingDTO:
        """Создает новое бронирование."""
        request = CreateBookingRequest.parse(draft)

        if not self._venues.exists(request.venue_id):
            raise ValidationError.single("venue_id", f"Неизвестная площадка {request.venue_id}")
        venue = self._venues.get(request.venue_id)

        with self._uow:
            booking = self._booking_service.create_booking(
                venue=venue,
                booking_date=request.date,
                time_slots=request.time_slots,
                name=request.name,
                email=request.email,
                phone=request.phone,
                company=request.company,
                purpose=request.purpose,
                notes=request.notes,
            )

            # Сохраняем изменения
            self._uow.commit()

        self._logger.info(
            "Booking created",
            booking_id=str(booking.id),
            venue_id=booking.venue_id,
            date=booking.date.isoformat(),
            slots=booking.time_slots,
        )
        return BookingDTO.from_domain(booking)

    def cancel_booking(
        self,
        booking_id: Union[EntityId, str],
        actor: Union[CancelledBy, str],
        reason: Optional[str] = None,
        claimed_email: Optional[str] = None,
        claimed_phone: Optional[str] = None,
    ) -> BookingDTO:
        """Отменяет бронирование от имени пользователя или администратора."""
        try:
            request = CancelBookingRequest(
                booking_id=_parse_booking_id(booking_id),
                actor=actor,
                reason=reason,
                claimed_email=claimed_email,
                claimed_phone=claimed_phone,
            )
        except PydanticValidationError as e:
            raise ValidationError(_field_errors(e)) from e

        with self._uow:
            booking = self._booking_service.cancel_booking(
                booking_id=request.booking_id,
                actor=request.actor,
                reason=request.reason,
                claimed_email=request.claimed_email,
                claimed_phone=request.claimed_phone,
            )

            # Сохраняем изменения
            self._uow.commit()

        self._logger.info(
            "Booking cancelled",
            booking_id=str(booking.id),
            cancelled_by=request.actor.value,
        )
        return BookingDTO.from_domain(booking)

    def get_booking(self, booking_id: Union[EntityId, str]) -> BookingDTO:
        """Возвращает информацию о бронировании."""
        parsed_id = _parse_booking_id(booking_id)
        for booking in self._uow.bookings.list_committed():
            if booking.id == parsed_id:
                return BookingDTO.from_domain(booking)
        raise NotFoundError(booking_id)

    def list_bookings(self, booking_filter: Optional[BookingFilter] = None) -> List[BookingDTO]:
        """Возвращает бронирования, удовлетворяющие фильтру, новые первыми."""
        bookings = filter_bookings(self._uow.bookings.list_committed(), booking_filter)
        return [BookingDTO.from_domain(booking) for booking in bookings]

    def export_bookings(self, venue_id: Optional[str] = None) -> List[BookingDTO]:
        """Все бронирования (в том числе отмененные) для отчетности."""
        return self.list_bookings(BookingFilter(venue_id=venue_id))

    def export_bookings_csv(self, venue_id: Optional[str] = None) -> str:
        bookings = filter_bookings(
            self._uow.bookings.list_committed(), BookingFilter(venue_id=venue_id)
        )
        return bookings_to_csv(bookings)

    def get_stats(self, booking_filter: Optional[BookingFilter] = None) -> BookingStats:
        return compute_stats(filter_bookings(self._uow.bookings.list_committed(), booking_filter))

    def check_availability(self, venue_id: str, booking_date: date) -> FrozenSet[str]:
        """Возвращает слоты площадки, уже занятые на указанную дату."""
        venue = self._venues.get(venue_id)
        return frozenset(
            occupied_slots(self._uow.bookings.list_committed(), venue.id, booking_date)
        )

    def get_day_schedule(self, venue_id: str, booking_date: date) -> List[SlotAvailability]:
        """Расписание дня: все слоты по порядку с признаком занятости."""
        occupied = self.check_availability(venue_id, booking_date)
        return [
            SlotAvailability(
                slot=slot,
                status=SlotStatus.BOOKED if slot in occupied else SlotStatus.AVAILABLE,
            )
            for slot in generate_day_slots()
        ]
