"""
Модуль контекста площадок (Venues Context).

Отвечает за:
- Каталог получасовых слотов
- Конфигурацию площадок и их бизнес-правила
"""

from . import domain, infrastructure, interfaces, slots

__all__ = [
    "domain",
    "infrastructure",
    "interfaces",
    "slots",
]
