"""
Доменная модель контекста бронирования.

Содержит агрегат бронирования, доменные события,
проверку конфликтов слотов и правила отмены.
"""

import secrets
import string
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Set

from pydantic import BaseModel, Field, PrivateAttr

from ..shared_kernel import (
    AlreadyCancelledError,
    AuthzError,
    BookingStatus,
    CancelledBy,
    ConflictError,
    DomainEvent,
    EntityId,
    ValidationError,
    generate_id,
    now,
    today,
)
from ..venues.domain import VenueConfig
from ..venues.slots import is_valid_slot, sort_slots

if TYPE_CHECKING:
    from .interfaces import IBookingRepository

_CODE_ALPHABET = string.ascii_lowercase + string.digits
CONFIRMATION_CODE_LENGTH = 10


def generate_confirmation_code() -> str:
    """Генерирует код подтверждения, который показывается клиенту."""
    return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(CONFIRMATION_CODE_LENGTH))


class BookingCreated(DomainEvent):
    """Событие создания бронирования.

    Несет снимок данных бронирования на момент операции.
    """

    booking_id: EntityId
    venue_id: str
    booking_date: date
    time_slots: List[str]
    name: str
    email: str
    phone: str
    company: str
    purpose: str
    confirmation_code: str


class BookingCancelled(DomainEvent):
    """Событие отмены бронирования."""

    booking_id: EntityId
    venue_id: str
    booking_date: date
    time_slots: List[str]
    name: str
    cancelled_by: CancelledBy
    reason: Optional[str] = None


class Booking(BaseModel):
    """Бронирование площадки на один день."""

    id: EntityId = Field(default_factory=generate_id)
    venue_id: str
    date: date
    time_slots: List[str] = Field(..., min_length=1)
    name: str
    email: str
    phone: str
    company: str
    purpose: str
    notes: Optional[str] = None
    status: BookingStatus = BookingStatus.CONFIRMED
    confirmation_code: str = Field(default_factory=generate_confirmation_code)
    created_at: datetime = Field(default_factory=now)
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[CancelledBy] = None
    cancel_reason: Optional[str] = None

    _domain_events: List[DomainEvent] = PrivateAttr(default_factory=list)

    @property
    def domain_events(self) -> List[DomainEvent]:
        """Возвращает список доменных событий."""
        return self._domain_events

    def pull_domain_events(self) -> List[DomainEvent]:
        events = list(self._domain_events)
        self._domain_events.clear()
        return events

    @property
    def is_confirmed(self) -> bool:
        return self.status == BookingStatus.CONFIRMED

    def cancel(self, cancelled_by: CancelledBy, reason: Optional[str] = None) -> None:
        """Отменяет бронирование. Отмененное бронирование не восстанавливается."""
        if self.status != BookingStatus.CONFIRMED:
            raise AlreadyCancelledError(self.id)

        self.status = BookingStatus.CANCELLED
        self.cancelled_at = now()
        self.cancelled_by = cancelled_by
        self.cancel_reason = reason
        self._domain_events.append(
            BookingCancelled(
                booking_id=self.id,
                venue_id=self.venue_id,
                booking_date=self.date,
                time_slots=list(self.time_slots),
                name=self.name,
                cancelled_by=cancelled_by,
                reason=reason,
            )
        )

    @classmethod
    def create(
        cls,
        venue_id: str,
        booking_date: date,
        time_slots: Iterable[str],
        name: str,
        email: str,
        phone: str,
        company: str,
        purpose: str,
        notes: Optional[str] = None,
    ) -> "Booking":
        """Создает новое подтвержденное бронирование."""
        booking = cls(
            venue_id=venue_id,
            date=booking_date,
            time_slots=sort_slots(time_slots),
            name=name,
            email=email,
            phone=phone,
            company=company,
            purpose=purpose,
            notes=notes,
        )

        booking._domain_events.append(
            BookingCreated(
                booking_id=booking.id,
                venue_id=booking.venue_id,
                booking_date=booking.date,
                time_slots=list(booking.time_slots),
                name=booking.name,
                email=booking.email,
                phone=booking.phone,
                company=booking.company,
                purpose=booking.purpose,
                confirmation_code=booking.confirmation_code,
            )
        )

        return booking


def occupied_slots(
    bookings: Iterable[Booking], venue_id: str, booking_date: date
) -> Set[str]:
    """Слоты, занятые подтвержденными бронированиями площадки на дату."""
    occupied: Set[str] = set()
    for booking in bookings:
        if (
            booking.status == BookingStatus.CONFIRMED
            and booking.venue_id == venue_id
            and booking.date == booking_date
        ):
            occupied.update(booking.time_slots)
    return occupied


def check_conflict(
    existing_bookings: Iterable[Booking],
    venue_id: str,
    booking_date: date,
    requested_slots: Iterable[str],
) -> Set[str]:
    """Возвращает запрошенные слоты, которые уже заняты (пустое множество - конфликта нет)."""
    return occupied_slots(existing_bookings, venue_id, booking_date) & set(requested_slots)


class ConflictChecker:
    """Проверка пересечения запрошенных слотов с подтвержденными бронированиями."""

    def __init__(self, booking_repository: "IBookingRepository"):
        self.booking_repository = booking_repository

    def find_conflicts(
        self, venue_id: str, booking_date: date, requested_slots: Iterable[str]
    ) -> Set[str]:
        existing = self.booking_repository.find_by_venue_and_date(venue_id, booking_date)
        return check_conflict(existing, venue_id, booking_date, requested_slots)

    def ensure_available(
        self, venue_id: str, booking_date: date, requested_slots: Iterable[str]
    ) -> None:
        conflicts = self.find_conflicts(venue_id, booking_date, requested_slots)
        if conflicts:
            raise ConflictError(conflicts)


class CancellationAuthorizer:
    """Правила авторизации отмены бронирования.

    Администратор может отменить любое бронирование. Пользователь должен
    указать email или телефон, совпадающий с данными бронирования; достаточно
    совпадения одного из них.
    """

    @staticmethod
    def authorize(
        booking: Booking,
        actor: CancelledBy,
        claimed_email: Optional[str] = None,
        claimed_phone: Optional[str] = None,
    ) -> None:
        if actor == CancelledBy.ADMIN:
            return

        if not claimed_email and not claimed_phone:
            raise AuthzError("Для отмены укажите email или телефон, использованные при бронировании")

        email_match = bool(claimed_email) and claimed_email == booking.email
        phone_match = bool(claimed_phone) and claimed_phone == booking.phone
        if not email_match and not phone_match:
            raise AuthzError("Email или телефон не совпадают с данными бронирования")


class BookingPolicy:
    """Бизнес-правила площадки для нового бронирования."""

    def __init__(self, clock: Callable[[], date] = today):
        self._clock = clock

    def validate(
        self,
        venue: VenueConfig,
        booking_date: date,
        time_slots: List[str],
        company: str,
        purpose: str,
    ) -> None:
        """Проверяет запрос по правилам площадки; все нарушения собираются в одну ошибку."""
        errors = {}

        if not time_slots:
            errors["time_slots"] = "Выберите хотя бы один слот"
        elif len(time_slots) > venue.max_slots:
            errors["time_slots"] = f"Можно выбрать не более {venue.max_slots} слотов"
        elif len(set(time_slots)) != len(time_slots):
            errors["time_slots"] = "Слоты не должны повторяться"
        else:
            unknown = [slot for slot in time_slots if not is_valid_slot(slot)]
            if unknown:
                errors["time_slots"] = f"Неизвестные слоты: {', '.join(unknown)}"

        if not venue.allows_company(company):
            errors["company"] = f"Компания {company!r} недоступна для площадки {venue.id}"

        if not venue.allows_purpose(purpose):
            errors["purpose"] = f"Цель {purpose!r} недоступна для площадки {venue.id}"

        if venue.max_advance_days is not None:
            current = self._clock()
            latest = current + timedelta(days=venue.max_advance_days)
            if booking_date < current:
                errors["date"] = "Нельзя бронировать прошедшие даты"
            elif booking_date > latest:
                errors["date"] = (
                    f"Бронирование возможно не более чем за {venue.max_advance_days} дней"
                )

        if errors:
            raise ValidationError(errors)


class BookingService:
    """Доменный сервис для работы с бронированиями."""

    def __init__(
        self,
        booking_repository: "IBookingRepository",
        policy: Optional[BookingPolicy] = None,
    ):
        self.booking_repository = booking_repository
        self.policy = policy or BookingPolicy()
        self.conflict_checker = ConflictChecker(booking_repository)

    def create_booking(
        self,
        venue: VenueConfig,
        booking_date: date,
        time_slots: List[str],
        name: str,
        email: str,
        phone: str,
        company: str,
        purpose: str,
        notes: Optional[str] = None,
    ) -> Booking:
        """Создает бронирование: правила площадки, затем проверка конфликтов."""
        self.policy.validate(venue, booking_date, time_slots, company, purpose)
        self.conflict_checker.ensure_available(venue.id, booking_date, time_slots)

        booking = Booking.create(
            venue_id=venue.id,
            booking_date=booking_date,
            time_slots=time_slots,
            name=name,
            email=email,
            phone=phone,
            company=company,
            purpose=purpose,
            notes=notes,
        )

        self.booking_repository.add(booking)
        return booking

    def cancel_booking(
        self,
        booking_id: EntityId,
        actor: CancelledBy,
        reason: Optional[str] = None,
        claimed_email: Optional[str] = None,
        claimed_phone: Optional[str] = None,
    ) -> Booking:
        """Отменяет бронирование после проверки прав инициатора."""
        current = self.booking_repository.get_by_id(booking_id)
        if not current.is_confirmed:
            raise AlreadyCancelledError(booking_id)

        CancellationAuthorizer.authorize(current, actor, claimed_email, claimed_phone)

        # Изменения применяются к копии, чтобы читатели видели запись целиком
        booking = current.model_copy(deep=True)
        booking.cancel(actor, reason)
        self.booking_repository.update(booking)
        return booking
