"""
Инфраструктурный слой контекста площадок.

Содержит реестр площадок со встроенной конфигурацией
и реестр, загружаемый из JSON-файла.
"""

import json
from pathlib import Path
from typing import Dict, Iterable, List, Union

from pydantic import ValidationError as PydanticValidationError

from ..shared_kernel import VenueNotFoundError
from . import interfaces as ports
from .domain import VenueConfig, VenueRules

_STUDIO_COMPANIES = ["SS Peaks", "藤原瓔唱片", "熾盛娛樂", "其他"]
_STUDIO_PURPOSES = ["發行作品錄音", "客戶錄音", "Demo錄音", "開會", "接案工作使用"]
_STUDIO_RULES = VenueRules(
    cancellation_policy="可取消",
    advance_booking="最多提前90天預約",
    restrictions=["禁止飲食", "使用後請清潔設備"],
)

DEFAULT_VENUES: List[VenueConfig] = [
    VenueConfig(
        id="dongmen-large",
        name="Dongmen Large Studio",
        description="Большая студия звукозаписи",
        admin_only=True,
        max_slots=4,
        max_advance_days=90,
        companies=_STUDIO_COMPANIES,
        purposes=_STUDIO_PURPOSES,
        facilities=["專業錄音設備", "調音台", "監聽音箱", "MIDI鍵盤"],
        rules=_STUDIO_RULES,
    ),
    VenueConfig(
        id="dongmen-small",
        name="Dongmen Small Studio",
        description="Малая студия звукозаписи",
        admin_only=True,
        max_slots=4,
        max_advance_days=90,
        companies=_STUDIO_COMPANIES,
        purposes=_STUDIO_PURPOSES,
        facilities=["錄音設備", "麥克風", "耳機", "音響"],
        rules=_STUDIO_RULES,
    ),
    VenueConfig(
        id="guting-practice",
        name="Guting Practice Room",
        description="Репетиционный зал",
        admin_only=False,
        max_slots=4,
        max_advance_days=90,
        companies=["SS Peaks", "熾盛娛樂", "藤原瓔唱片", "其他"],
        purposes=[
            "公司藝人培訓課程",
            "公司商演練習（不含跑場）",
            "對外教學租借使用",
            "小組評比練習",
            "藝人等級",
            "準藝人等級",
            "S級",
            "其他",
        ],
        facilities=["投影機", "音響", "瑜珈墊", "抱枕", "除濕機"],
        rules=VenueRules(
            cancellation_policy="可取消",
            advance_booking="最多提前90天預約",
            restrictions=[
                "除了老師之外，全面禁止飲食",
                "使用瑜珈墊和抱枕前須先掃地+拖地",
                "進出教室需協助除濕機水管理",
                "使用後場地要復原",
            ],
        ),
    ),
]


class StaticVenueRegistry(ports.IVenueRegistry):
    """Реестр площадок с неизменяемым набором конфигураций."""

    def __init__(self, venues: Iterable[VenueConfig] = ()):
        self._venues: Dict[str, VenueConfig] = {}
        for venue in venues:
            if venue.id in self._venues:
                raise ValueError(f"Venue {venue.id} is configured twice")
            self._venues[venue.id] = venue

    @classmethod
    def with_defaults(cls) -> "StaticVenueRegistry":
        return cls(DEFAULT_VENUES)

    def get(self, venue_id: str) -> VenueConfig:
        if venue_id not in self._venues:
            raise VenueNotFoundError(venue_id)
        return self._venues[venue_id]

    def exists(self, venue_id: str) -> bool:
        return venue_id in self._venues

    def list_venues(self, include_admin_only: bool = False) -> List[VenueConfig]:
        """Список площадок; площадки только для администраторов скрыты по умолчанию."""
        return [
            venue
            for venue in self._venues.values()
            if include_admin_only or not venue.admin_only
        ]


class JsonFileVenueRegistry(StaticVenueRegistry):
    """Реестр площадок, загружаемый из JSON-файла со списком конфигураций."""

    def __init__(self, file_path: Union[str, Path]):
        self._file_path = Path(file_path)
        super().__init__(self._load())

    def _load(self) -> List[VenueConfig]:
        with open(self._file_path, "r", encoding="utf-8") as f:
            items = json.load(f)

        try:
            return [VenueConfig.model_validate(item) for item in items]
        except PydanticValidationError as e:
            raise ValueError(f"Invalid venue configuration in {self._file_path}: {e}") from e
