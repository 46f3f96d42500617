"""
Summary Calculator - plate/tea totals and monetary amounts.

Pure functions over DailySummary values. Rates are always passed in;
nothing here reads stored configuration.

Only guest (global rates) and special (per-day rates) are chargeable.
Tea/coffee is never folded into plate counts. Catering is a headcount
reported on its own and is not part of the grand total.
"""
from datetime import date
from typing import Dict, Iterable, Mapping, Optional

from pydantic import BaseModel, Field

from bhojnalay.schemas import (
    Category,
    DailySummary,
    DEFAULT_SPECIAL_RATES,
    MEAL_CATEGORIES,
    MealCounts,
    MealRates,
    MealType,
    PLATE_MEAL_TYPES,
    Rates,
    SpecialDailyRates,
)


class CategoryTotals(BaseModel):
    plates: int = 0
    tea: int = 0
    total: int = 0


class DailyTotals(BaseModel):
    date: date
    guest: CategoryTotals
    staff: CategoryTotals
    sevak: CategoryTotals
    special: CategoryTotals
    catering: int
    grand_total: int
    guest_amount: float
    special_amount: float
    grand_amount: float


class RangeTotals(BaseModel):
    days: int = 0
    meals: Dict[Category, MealCounts] = Field(
        default_factory=lambda: {c: MealCounts() for c in MEAL_CATEGORIES}
    )
    categories: Dict[Category, CategoryTotals] = Field(
        default_factory=lambda: {c: CategoryTotals() for c in MEAL_CATEGORIES}
    )
    catering: int = 0
    grand_total: int = 0
    guest_amount: float = 0
    special_amount: float = 0
    grand_amount: float = 0


def get_plate_count(meals: MealCounts) -> int:
    """Solid meals and parcels; excludes tea/coffee"""
    return sum(meals.get(m) for m in PLATE_MEAL_TYPES)


def get_tea_count(meals: MealCounts) -> int:
    return meals.tea_coffee


def get_category_total(meals: MealCounts) -> int:
    return get_plate_count(meals) + get_tea_count(meals)


def get_catering_count(summary: DailySummary, rates: Rates) -> int:
    # A stored catering count of 0 counts as absent
    if summary.catering > 0:
        return summary.catering
    return rates.catering_staff_default


def get_meal_amount(meals: MealCounts, rates: MealRates) -> float:
    return sum(meals.get(m) * rates.rate_for(m) for m in MealType)


def get_guest_amount(summary: DailySummary, rates: Rates) -> float:
    return get_meal_amount(summary.guest, rates)


def get_special_amount(
    summary: DailySummary,
    special_rates: Optional[SpecialDailyRates],
) -> float:
    """Special plates are free unless rates were set for that date"""
    return get_meal_amount(summary.special, special_rates or DEFAULT_SPECIAL_RATES)


def _category_totals(meals: MealCounts) -> CategoryTotals:
    return CategoryTotals(
        plates=get_plate_count(meals),
        tea=get_tea_count(meals),
        total=get_category_total(meals),
    )


def calculate_daily_totals(
    summary: DailySummary,
    rates: Rates,
    special_rates: Optional[SpecialDailyRates] = None,
) -> DailyTotals:
    per_category = {c: _category_totals(summary.meals_for(c)) for c in MEAL_CATEGORIES}
    catering = get_catering_count(summary, rates)
    guest_amount = get_guest_amount(summary, rates)
    special_amount = get_special_amount(summary, special_rates)

    return DailyTotals(
        date=summary.date,
        guest=per_category[Category.GUEST],
        staff=per_category[Category.STAFF],
        sevak=per_category[Category.SEVAK],
        special=per_category[Category.SPECIAL],
        catering=catering,
        grand_total=sum(t.total for t in per_category.values()),
        guest_amount=guest_amount,
        special_amount=special_amount,
        grand_amount=guest_amount + special_amount,
    )


def calculate_range_totals(
    summaries: Iterable[DailySummary],
    rates: Rates,
    special_rates_by_date: Optional[Mapping[date, SpecialDailyRates]] = None,
) -> RangeTotals:
    """Sum daily totals across a date range.

    Amounts are summed per day because special rates differ by date.
    """
    special_rates_by_date = special_rates_by_date or {}
    totals = RangeTotals()

    for summary in summaries:
        daily = calculate_daily_totals(summary, rates, special_rates_by_date.get(summary.date))
        totals.days += 1
        for category in MEAL_CATEGORIES:
            meals = summary.meals_for(category)
            for meal_type in MealType:
                totals.meals[category].add(meal_type, meals.get(meal_type))
            day_cat = getattr(daily, category.value)
            cat_totals = totals.categories[category]
            cat_totals.plates += day_cat.plates
            cat_totals.tea += day_cat.tea
            cat_totals.total += day_cat.total
        totals.catering += daily.catering
        totals.grand_total += daily.grand_total
        totals.guest_amount += daily.guest_amount
        totals.special_amount += daily.special_amount
        totals.grand_amount += daily.grand_amount

    return totals
