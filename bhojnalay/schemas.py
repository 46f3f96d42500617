"""
Domain schemas - plate entries, daily summaries and rate tables
"""
import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from bhojnalay.utils.validators import validate_time_string


class Category(str, Enum):
    GUEST = "guest"
    STAFF = "staff"
    SEVAK = "sevak"
    CATERING = "catering"
    SPECIAL = "special"


class MealType(str, Enum):
    NAVKARSHI = "navkarshi"
    LUNCH = "lunch"
    CHOVIHAR = "chovihar"
    TEA_COFFEE = "tea_coffee"
    PARCEL = "parcel"


# Categories broken down by meal type (catering is a single headcount)
MEAL_CATEGORIES = (Category.GUEST, Category.STAFF, Category.SEVAK, Category.SPECIAL)

# Solid meals; tea/coffee is counted separately
PLATE_MEAL_TYPES = (MealType.NAVKARSHI, MealType.LUNCH, MealType.CHOVIHAR, MealType.PARCEL)

# Placeholder meal type stored on catering entries
CATERING_MEAL_TYPE = MealType.LUNCH


def resolve_meal_type(category: Category, meal_type: Optional[MealType]) -> MealType:
    """Catering falls back to the placeholder; every other category needs a meal type"""
    if meal_type is not None:
        return meal_type
    if category == Category.CATERING:
        return CATERING_MEAL_TYPE
    raise ValueError(f"meal_type is required for category '{category.value}'")


# --- Plate entries ---

class PlateEntryCreate(BaseModel):
    """A new log row, before the store assigns id and timestamp"""
    date: dt.date
    time: str
    category: Category
    meal_type: Optional[MealType] = None
    count: int = Field(ge=0)

    @field_validator("time")
    @classmethod
    def _check_time(cls, v: str) -> str:
        return validate_time_string(v)

    @model_validator(mode="after")
    def _check_meal_type(self) -> "PlateEntryCreate":
        self.meal_type = resolve_meal_type(self.category, self.meal_type)
        return self


class PlateEntryUpdate(BaseModel):
    category: Optional[Category] = None
    meal_type: Optional[MealType] = None
    count: Optional[int] = Field(default=None, ge=0)


class PlateEntryRead(BaseModel):
    id: str
    date: dt.date
    time: str
    category: Category
    meal_type: MealType
    count: int
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True

    def apply(self, updates: PlateEntryUpdate) -> "PlateEntryRead":
        return self.model_copy(update=updates.model_dump(exclude_none=True))


# --- Summaries ---

class MealCounts(BaseModel):
    navkarshi: int = 0
    lunch: int = 0
    chovihar: int = 0
    tea_coffee: int = 0
    parcel: int = 0

    def get(self, meal_type: MealType) -> int:
        return getattr(self, meal_type.value)

    def add(self, meal_type: MealType, count: int) -> None:
        setattr(self, meal_type.value, self.get(meal_type) + count)


class DailySummary(BaseModel):
    """Per-date aggregation of plate entries; derived, never stored"""
    date: dt.date
    guest: MealCounts = Field(default_factory=MealCounts)
    staff: MealCounts = Field(default_factory=MealCounts)
    sevak: MealCounts = Field(default_factory=MealCounts)
    special: MealCounts = Field(default_factory=MealCounts)
    catering: int = 0

    def meals_for(self, category: Category) -> MealCounts:
        if category == Category.CATERING:
            raise ValueError("Catering has no meal type breakdown")
        return getattr(self, category.value)

    def cell(self, category: Category, meal_type: MealType) -> int:
        if category == Category.CATERING:
            return self.catering
        return self.meals_for(category).get(meal_type)


# --- Rates ---

class MealRates(BaseModel):
    navkarshi: float = Field(default=0, ge=0)
    lunch: float = Field(default=0, ge=0)
    chovihar: float = Field(default=0, ge=0)
    tea_coffee: float = Field(default=0, ge=0)
    parcel: float = Field(default=0, ge=0)

    def rate_for(self, meal_type: MealType) -> float:
        return getattr(self, meal_type.value)

    def meal_rates(self) -> "MealRates":
        return MealRates(**{m.value: self.rate_for(m) for m in MealType})


class Rates(MealRates):
    """Global rate table plus default catering headcount"""
    navkarshi: float = Field(default=50, ge=0)
    lunch: float = Field(default=100, ge=0)
    chovihar: float = Field(default=50, ge=0)
    tea_coffee: float = Field(default=20, ge=0)
    parcel: float = Field(default=30, ge=0)
    catering_staff_default: int = Field(default=10, ge=0)


class SpecialDailyRates(MealRates):
    """Per-date rates applied only to the special category"""
    date: dt.date


DEFAULT_RATES = Rates()
DEFAULT_SPECIAL_RATES = MealRates()
