"""
Модуль контекста бронирования (Booking Context).

Отвечает за бронирование площадок, включая:
- Создание и отмену бронирований
- Проверку конфликтов получасовых слотов
- Выборки, статистику и выгрузку бронирований
"""

from . import application, domain, infrastructure, interfaces, reporting

__all__ = [
    "application",
    "domain",
    "infrastructure",
    "interfaces",
    "reporting",
]
