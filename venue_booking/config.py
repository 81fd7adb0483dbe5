"""
Настройки движка бронирования.
"""
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, field_validator

ENV_PREFIX = "VENUE_BOOKING_"


class Settings(BaseModel):
    """Настройки приложения.

    Без ``storage_dir`` бронирования и журнал хранятся только в памяти.
    """

    storage_dir: Optional[Path] = None
    bookings_file: str = "bookings.json"
    audit_file: str = "audit_log.json"
    venues_file: Optional[Path] = None
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v

    @property
    def bookings_path(self) -> Optional[Path]:
        if self.storage_dir is None:
            return None
        return self.storage_dir / self.bookings_file

    @property
    def audit_path(self) -> Optional[Path]:
        if self.storage_dir is None:
            return None
        return self.storage_dir / self.audit_file

    @classmethod
    def from_env(cls) -> "Settings":
        """Читает настройки из переменных окружения VENUE_BOOKING_*."""
        values = {}
        for field in ("storage_dir", "bookings_file", "audit_file", "venues_file", "log_level"):
            value = os.getenv(ENV_PREFIX + field.upper())
            if value:
                values[field] = value
        return cls(**values)
