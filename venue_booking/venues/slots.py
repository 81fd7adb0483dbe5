"""
Каталог временных слотов.

Сутки разбиты на 48 получасовых интервалов вида ``HH:MM-HH:MM``
(от ``00:00-00:30`` до ``23:30-24:00``).
"""

from typing import Iterable, Iterator, List, Tuple

SLOT_MINUTES = 30
SLOTS_PER_DAY = 24 * 60 // SLOT_MINUTES


def format_slot(hour: int, minute: int) -> str:
    """Формирует идентификатор слота, начинающегося в hour:minute."""
    end_hour = hour + 1 if minute == 30 else hour
    end_minute = 0 if minute == 30 else minute + 30
    return f"{hour:02d}:{minute:02d}-{end_hour:02d}:{end_minute:02d}"


def generate_day_slots() -> Iterator[str]:
    """Лениво перечисляет все слоты суток по порядку.

    Каждый вызов возвращает новый генератор, поэтому перечисление
    можно начинать заново сколько угодно раз.
    """
    for hour in range(24):
        for minute in range(0, 60, SLOT_MINUTES):
            yield format_slot(hour, minute)


DAY_SLOTS: Tuple[str, ...] = tuple(generate_day_slots())
_SLOT_POSITIONS = {slot: index for index, slot in enumerate(DAY_SLOTS)}


def is_valid_slot(slot: str) -> bool:
    return slot in _SLOT_POSITIONS


def slot_index(slot: str) -> int:
    """Порядковый номер слота в сутках (KeyError для неизвестного слота)."""
    return _SLOT_POSITIONS[slot]


def sort_slots(slots: Iterable[str]) -> List[str]:
    """Упорядочивает слоты по времени начала."""
    return sorted(slots, key=slot_index)
