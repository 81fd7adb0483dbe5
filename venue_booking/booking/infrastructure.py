"""
Инфраструктурный слой контекста бронирования.

Содержит реализации репозиториев, логгера, шины событий и Unit of Work.
"""
import json
import logging
import os
import tempfile
import threading
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Type, Union

from pydantic import ValidationError as PydanticValidationError

from ..shared_kernel import DomainEvent, EntityId, NotFoundError, StorageError
from . import interfaces as ports
from .domain import Booking


def write_json_atomic(file_path: Path, data: Any) -> None:
    """Записывает JSON во временный файл и атомарно заменяет им целевой файл."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{file_path.name}.", suffix=".tmp", dir=str(file_path.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, file_path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def read_json_list(file_path: Path) -> List[Dict[str, Any]]:
    """Читает JSON-список; отсутствующий или пустой файл - пустой список."""
    if not file_path.exists():
        return []

    with open(file_path, "r", encoding="utf-8") as f:
        raw_data = f.read()

    if not raw_data.strip():
        return []

    items = json.loads(raw_data)
    if not isinstance(items, list):
        raise StorageError(f"Expected a JSON list in {file_path}")
    return items


class InMemoryBookingRepository(ports.IBookingRepository):
    """Реализация репозитория бронирований в памяти.

    Новые и измененные записи хранятся отдельно до вызова flush(),
    после чего сохраненная коллекция заменяется целиком.
    """

    def __init__(
        self,
        bookings: Optional[List[Booking]] = None,
        logger: Optional[ports.ILogger] = None,
    ):
        self._logger = logger or StdLibLogger()
        self._committed: Dict[EntityId, Booking] = {
            booking.id: booking for booking in bookings or []
        }
        self._pending: Dict[EntityId, Booking] = {}

    def _current(self, booking_id: EntityId) -> Optional[Booking]:
        if booking_id in self._pending:
            return self._pending[booking_id]
        return self._committed.get(booking_id)

    def add(self, booking: Booking) -> None:
        if self._current(booking.id) is not None:
            raise ValueError(f"Booking with id {booking.id} already exists")
        self._pending[booking.id] = booking

    def update(self, booking: Booking) -> None:
        if self._current(booking.id) is None:
            raise NotFoundError(booking.id)
        self._pending[booking.id] = booking

    def get_by_id(self, booking_id: EntityId) -> Booking:
        booking = self._current(booking_id)
        if booking is None:
            raise NotFoundError(booking_id)
        return booking

    def find_by_venue_and_date(self, venue_id: str, booking_date: date) -> List[Booking]:
        merged = {**self._committed, **self._pending}
        return [
            booking
            for booking in merged.values()
            if booking.venue_id == venue_id and booking.date == booking_date
        ]

    def list_committed(self) -> List[Booking]:
        return list(self._committed.values())

    def pending(self) -> List[Booking]:
        return list(self._pending.values())

    def flush(self) -> None:
        """Сохраняет накопленные изменения."""
        if not self._pending:
            return
        merged = {**self._committed, **self._pending}
        self._write(list(merged.values()))
        self._committed = merged
        self._pending = {}
        self._logger.debug("Bookings flushed", total=len(merged))

    def discard(self) -> None:
        """Отбрасывает несохраненные изменения."""
        self._pending = {}

    def restore(self, bookings: List[Booking]) -> None:
        """Возвращает ранее сохраненное состояние (после неудачной фиксации)."""
        self._write(bookings)
        self._committed = {booking.id: booking for booking in bookings}
        self._pending = {}
        self._logger.warning("Bookings restored", total=len(bookings))

    def _write(self, bookings: List[Booking]) -> None:
        pass


class JsonFileBookingRepository(InMemoryBookingRepository):
    """Репозиторий бронирований, сохраняющий данные в JSON-файл.

    При создании загружает все записи (включая отмененные) без повторной
    проверки конфликтов; каждая запись сбрасывается на диск при flush().
    """

    def __init__(
        self, file_path: Union[str, Path], logger: Optional[ports.ILogger] = None
    ):
        self._file_path = Path(file_path)
        super().__init__(self._load_data(), logger=logger)

    @property
    def file_path(self) -> Path:
        return self._file_path

    def _load_data(self) -> List[Booking]:
        """Загружает данные из JSON-файла."""
        try:
            items = read_json_list(self._file_path)
            return [Booking.model_validate(item) for item in items]
        except (OSError, ValueError, PydanticValidationError) as e:
            raise StorageError(f"Failed to load bookings from {self._file_path}: {e}") from e

    def _write(self, bookings: List[Booking]) -> None:
        """Сохраняет данные в JSON-файл."""
        data = [booking.model_dump(mode="json") for booking in bookings]
        try:
            write_json_atomic(self._file_path, data)
        except OSError as e:
            raise StorageError(f"Failed to write bookings to {self._file_path}: {e}") from e


class StdLibLogger(ports.ILogger):
    """Логгер, передающий сообщения в стандартный модуль logging."""

    def __init__(self, name: str = "venue_booking"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, message: str, context: Dict[str, Any]) -> None:
        if context:
            message = f"{message} | context={json.dumps(context, default=str, ensure_ascii=False)}"
        self._logger.log(level, message)

    def info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._log(logging.ERROR, message, kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, kwargs)

    def debug(self, message: str, **kwargs) -> None:
        self._log(logging.DEBUG, message, kwargs)


class InMemoryEventBus(ports.IEventBus):
    """Реализация шины событий в памяти."""

    def __init__(self, logger: Optional[ports.ILogger] = None):
        self._required: Dict[Type[DomainEvent], List[Callable[[Any], None]]] = {}
        self._subscribers: Dict[Type[DomainEvent], List[Callable[[Any], None]]] = {}
        self._logger = logger or StdLibLogger()

    def publish(self, event: DomainEvent) -> None:
        """Публикует событие.

        Обязательные обработчики вызываются первыми, их ошибки пробрасываются
        вызывающему. Ошибки остальных обработчиков только логируются.
        """
        event_type = type(event)
        required = self._required.get(event_type, [])
        optional = self._subscribers.get(event_type, [])
        if not required and not optional:
            self._logger.debug(f"No subscribers for event type {event_type.__name__}")
            return

        self._logger.info(
            f"Publishing event: {event_type.__name__}", event=event.model_dump(mode="json")
        )

        for handler in required:
            try:
                handler(event)
            except Exception as e:
                self._logger.error(
                    f"Required event handler failed for {event_type.__name__}",
                    error=str(e),
                    event=event.model_dump(mode="json"),
                )
                raise

        for handler in optional:
            try:
                handler(event)
            except Exception as e:
                self._logger.error(
                    f"Error in event handler for {event_type.__name__}",
                    error=str(e),
                    event=event.model_dump(mode="json"),
                )

    def subscribe(self, event_type: Type[DomainEvent], handler, required: bool = False) -> None:
        """Подписывает обработчик на события указанного типа."""
        handlers = self._required if required else self._subscribers
        handlers.setdefault(event_type, []).append(handler)
        self._logger.debug(
            f"Subscribed handler to {event_type.__name__} events", required=required
        )


class BookingUnitOfWork(ports.IBookingUnitOfWork):
    """Единица работы для контекста бронирования.

    Вход в контекст захватывает блокировку на все время
    «проверка конфликтов - фиксация - запись на диск».
    """

    def __init__(
        self,
        bookings_repo: Optional[ports.IBookingRepository] = None,
        event_bus: Optional[ports.IEventBus] = None,
        logger: Optional[ports.ILogger] = None,
    ):
        self._bookings = bookings_repo or InMemoryBookingRepository()
        self._logger = logger or StdLibLogger()
        self._event_bus = event_bus or InMemoryEventBus(self._logger)
        self._lock = threading.RLock()

    @property
    def bookings(self) -> ports.IBookingRepository:
        return self._bookings

    @property
    def event_bus(self) -> ports.IEventBus:
        return self._event_bus

    def commit(self) -> None:
        """Фиксирует все изменения и публикует накопленные события.

        Если обязательный обработчик события (журнал операций) завершился
        ошибкой, записанные изменения отменяются и ошибка пробрасывается.
        """
        previous = self._bookings.list_committed()
        changed = self._bookings.pending()
        self._bookings.flush()

        events: List[DomainEvent] = []
        for booking in changed:
            events.extend(booking.pull_domain_events())

        try:
            for event in events:
                self._event_bus.publish(event)
        except Exception:
            self._bookings.restore(previous)
            self._logger.warning("BookingUnitOfWork commit reverted", changed=len(changed))
            raise

        self._logger.info("BookingUnitOfWork committed", changed=len(changed))

    def rollback(self) -> None:
        """Откатывает все изменения."""
        self._bookings.discard()
        self._logger.warning("BookingUnitOfWork rolled back")

    def __enter__(self):
        self._lock.acquire()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is not None:
                self.rollback()
            elif self._bookings.pending():
                self.rollback()
        finally:
            self._lock.release()
        return False  # Пробрасываем исключение дальше, если оно было
