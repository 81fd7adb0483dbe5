"""
Система бронирования площадок (студий звукозаписи, репетиционных залов).

Ядро системы - движок резервирования получасовых слотов:
- Каталог слотов и реестр площадок
- Проверка конфликтов и создание бронирований
- Отмена бронирований пользователем или администратором
- Журнал операций и выгрузка отчетов
"""

from . import audit, booking, shared_kernel, venues

__all__ = [
    "audit",
    "booking",
    "shared_kernel",
    "venues",
]
