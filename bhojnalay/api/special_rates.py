"""
Special daily rate API endpoints - per-day rates for the special category
"""
from fastapi import APIRouter, Depends, HTTPException
from typing import List
import datetime as dt
from pydantic import BaseModel

from bhojnalay.api.deps import get_special_rate_store
from bhojnalay.schemas import DEFAULT_SPECIAL_RATES, MealRates, SpecialDailyRates
from bhojnalay.services.rate_store import SpecialRateStore
from bhojnalay.utils.validators import validate_date_range

router = APIRouter()


class SpecialRatesResponse(BaseModel):
    date: dt.date
    rates: MealRates
    is_set: bool


@router.get("/", response_model=List[SpecialDailyRates])
async def list_special_rates(
    start_date: dt.date,
    end_date: dt.date,
    store: SpecialRateStore = Depends(get_special_rate_store),
):
    """Special rates saved for dates within the range"""
    try:
        validate_date_range(start_date, end_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    by_date = await store.load_for_range(start_date, end_date)
    return [by_date[d] for d in sorted(by_date)]


@router.get("/{day}", response_model=SpecialRatesResponse)
async def get_special_rates(
    day: dt.date,
    store: SpecialRateStore = Depends(get_special_rate_store),
):
    """Rates for one date; all zero when none were set"""
    special = await store.load_for_date(day)
    if special is None:
        return SpecialRatesResponse(date=day, rates=DEFAULT_SPECIAL_RATES, is_set=False)
    return SpecialRatesResponse(date=day, rates=special.meal_rates(), is_set=True)


@router.put("/{day}", response_model=SpecialRatesResponse)
async def save_special_rates(
    day: dt.date,
    rates: MealRates,
    store: SpecialRateStore = Depends(get_special_rate_store),
):
    if not await store.save_for_date(day, rates):
        raise HTTPException(status_code=500, detail="Error saving special rates. Please try again.")
    return SpecialRatesResponse(date=day, rates=rates, is_set=True)
