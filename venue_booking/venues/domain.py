"""
Доменная модель контекста площадок.

Площадка - статическая конфигурация: лимит слотов на одно бронирование,
допустимые компании и цели использования, правила и оснащение.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class VenueRules(BaseModel):
    """Правила использования площадки (только для отображения)."""

    model_config = ConfigDict(frozen=True)

    cancellation_policy: str = ""
    advance_booking: str = ""
    restrictions: List[str] = Field(default_factory=list)


class VenueConfig(BaseModel):
    """Конфигурация площадки."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    admin_only: bool = False
    business_hours: str = "24H"
    min_booking_unit: int = 30  # минуты
    max_booking_duration: int = 120  # минуты
    max_slots: int = Field(..., gt=0)
    max_advance_days: Optional[int] = Field(None, ge=0)
    companies: List[str] = Field(default_factory=list)
    purposes: List[str] = Field(default_factory=list)
    facilities: List[str] = Field(default_factory=list)
    rules: VenueRules = Field(default_factory=VenueRules)

    def allows_company(self, company: str) -> bool:
        return company in self.companies

    def allows_purpose(self, purpose: str) -> bool:
        return purpose in self.purposes
