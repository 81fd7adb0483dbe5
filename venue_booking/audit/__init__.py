"""
Модуль контекста журнала операций (Audit Context).

Ведет неизменяемый журнал создания и отмены бронирований.
"""

from . import application, domain, event_handlers, infrastructure, interfaces

__all__ = [
    "application",
    "domain",
    "event_handlers",
    "infrastructure",
    "interfaces",
]
