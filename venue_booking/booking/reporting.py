"""
Выборки и отчеты по бронированиям.

Чистые функции без побочных эффектов: фильтрация, сортировка,
статистика и выгрузка в CSV.
"""

import csv
import io
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from ..shared_kernel import BookingStatus
from .domain import Booking


class StatusFilter(str, Enum):
    """Фильтр по статусу бронирования."""

    ALL = "all"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class BookingFilter(BaseModel):
    """Условия выборки; все заданные условия объединяются через И."""

    model_config = ConfigDict(frozen=True)

    venue_id: Optional[str] = None
    status: StatusFilter = StatusFilter.ALL
    search: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def end_not_before_start(self) -> "BookingFilter":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("Конечная дата не может быть раньше начальной")
        return self

    def matches(self, booking: Booking) -> bool:
        if self.venue_id is not None and booking.venue_id != self.venue_id:
            return False

        if self.status != StatusFilter.ALL and booking.status.value != self.status.value:
            return False

        if self.search:
            term = self.search.lower()
            haystack = (
                booking.name,
                booking.email,
                booking.phone,
                booking.company,
                booking.purpose,
            )
            if not any(term in value.lower() for value in haystack):
                return False

        if self.start_date is not None and booking.date < self.start_date:
            return False
        if self.end_date is not None and booking.date > self.end_date:
            return False

        return True


class BookingStats(BaseModel):
    """Сводные показатели по выборке бронирований."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    confirmed: int = 0
    cancelled: int = 0
    total_slots: int = 0


def newest_first(bookings: Iterable[Booking]) -> List[Booking]:
    """Сортирует бронирования по времени создания, новые первыми."""
    return sorted(bookings, key=lambda booking: booking.created_at, reverse=True)


def filter_bookings(
    bookings: Iterable[Booking], booking_filter: Optional[BookingFilter] = None
) -> List[Booking]:
    booking_filter = booking_filter or BookingFilter()
    return newest_first(b for b in bookings if booking_filter.matches(b))


def compute_stats(bookings: Iterable[Booking]) -> BookingStats:
    total = confirmed = cancelled = total_slots = 0
    for booking in bookings:
        total += 1
        if booking.status == BookingStatus.CONFIRMED:
            confirmed += 1
            total_slots += len(booking.time_slots)
        else:
            cancelled += 1
    return BookingStats(
        total=total, confirmed=confirmed, cancelled=cancelled, total_slots=total_slots
    )


CSV_HEADERS = [
    "ID",
    "Name",
    "Email",
    "Phone",
    "Company",
    "Purpose",
    "Date",
    "Time slots",
    "Status",
    "Notes",
    "Created at",
]


def bookings_to_csv(bookings: Iterable[Booking]) -> str:
    """Выгружает бронирования в CSV (все поля в кавычках)."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for booking in bookings:
        writer.writerow(
            [
                str(booking.id),
                booking.name,
                booking.email,
                booking.phone,
                booking.company,
                booking.purpose,
                booking.date.isoformat(),
                "; ".join(booking.time_slots),
                booking.status.value,
                booking.notes or "",
                booking.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            ]
        )
    return output.getvalue()
