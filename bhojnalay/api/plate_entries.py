"""
Plate entry API endpoints - logging counts, daily summary and summary edits
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List, Optional
import datetime as dt
from pydantic import BaseModel, Field, field_validator, model_validator

from bhojnalay.api.deps import get_log_store, get_rate_store, get_special_rate_store
from bhojnalay.schemas import (
    Category,
    DailySummary,
    MealType,
    PlateEntryCreate,
    PlateEntryRead,
    PlateEntryUpdate,
    Rates,
    resolve_meal_type,
)
from bhojnalay.services.aggregator import aggregate_entries_to_summary
from bhojnalay.services.log_store import LogStore
from bhojnalay.services.rate_store import RateStore, SpecialRateStore
from bhojnalay.services.reconciler import reconcile_cell
from bhojnalay.services.summary_calculator import DailyTotals, calculate_daily_totals
from bhojnalay.utils.helpers import current_time_hhmm
from bhojnalay.utils.validators import validate_count, validate_date_range, validate_time_string

router = APIRouter()


# --- Pydantic Schemas ---

class PlateEntryIn(BaseModel):
    date: Optional[dt.date] = None
    time: Optional[str] = None
    category: Category
    meal_type: Optional[MealType] = None
    count: int

    @field_validator("count")
    @classmethod
    def _check_count(cls, v: int) -> int:
        return validate_count(v)

    @field_validator("time")
    @classmethod
    def _check_time(cls, v: Optional[str]) -> Optional[str]:
        return validate_time_string(v) if v is not None else v

    @model_validator(mode="after")
    def _check_meal_type(self) -> "PlateEntryIn":
        self.meal_type = resolve_meal_type(self.category, self.meal_type)
        return self


class PlateEntryEdit(BaseModel):
    category: Optional[Category] = None
    meal_type: Optional[MealType] = None
    count: Optional[int] = None

    @field_validator("count")
    @classmethod
    def _check_count(cls, v: Optional[int]) -> Optional[int]:
        return validate_count(v) if v is not None else v


class CellEdit(BaseModel):
    date: dt.date
    category: Category
    meal_type: Optional[MealType] = None
    target: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_meal_type(self) -> "CellEdit":
        self.meal_type = resolve_meal_type(self.category, self.meal_type)
        return self


class DailySummaryResponse(BaseModel):
    summary: DailySummary
    totals: DailyTotals
    rates: Rates


class CellEditResponse(BaseModel):
    date: dt.date
    category: Category
    meal_type: MealType
    previous: int
    target: int
    value: int
    created: List[PlateEntryRead]
    updated: List[str]
    deleted: List[str]
    shortfall: int
    summary: DailySummary


# --- Helper ---

async def _daily_summary(
    store: LogStore,
    rate_store: RateStore,
    special_store: SpecialRateStore,
    day: dt.date,
) -> DailySummaryResponse:
    entries = await store.query_by_date(day)
    summary = aggregate_entries_to_summary(entries).get(day) or DailySummary(date=day)
    rates = await rate_store.load()
    special = await special_store.load_for_date(day)
    return DailySummaryResponse(
        summary=summary,
        totals=calculate_daily_totals(summary, rates, special),
        rates=rates,
    )


# --- Endpoints ---

@router.get("/", response_model=List[PlateEntryRead])
async def list_entries(
    day: Optional[dt.date] = Query(default=None, alias="date"),
    store: LogStore = Depends(get_log_store),
):
    """Entries logged for one date (default today), oldest first"""
    return await store.query_by_date(day or dt.date.today())


@router.get("/range", response_model=List[PlateEntryRead])
async def list_entries_in_range(
    start_date: dt.date,
    end_date: dt.date,
    store: LogStore = Depends(get_log_store),
):
    try:
        validate_date_range(start_date, end_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return await store.query_by_date_range(start_date, end_date)


@router.post("/", response_model=PlateEntryRead)
async def add_entry(
    data: PlateEntryIn,
    store: LogStore = Depends(get_log_store),
):
    """Log a new plate count"""
    now = dt.datetime.now()
    entry = await store.add_entry(PlateEntryCreate(
        date=data.date or now.date(),
        time=data.time or current_time_hhmm(now),
        category=data.category,
        meal_type=data.meal_type,
        count=data.count,
    ))
    if entry is None:
        raise HTTPException(status_code=500, detail="Could not save entry, please try again")
    return entry


@router.get("/summary", response_model=DailySummaryResponse)
async def get_daily_summary(
    day: Optional[dt.date] = Query(default=None, alias="date"),
    store: LogStore = Depends(get_log_store),
    rate_store: RateStore = Depends(get_rate_store),
    special_store: SpecialRateStore = Depends(get_special_rate_store),
):
    """Aggregated counts, totals and amounts for one date"""
    return await _daily_summary(store, rate_store, special_store, day or dt.date.today())


@router.put("/summary/cell", response_model=CellEditResponse)
async def edit_summary_cell(
    data: CellEdit,
    store: LogStore = Depends(get_log_store),
):
    """Set the aggregated total of one summary cell by editing the log"""
    result = await reconcile_cell(store, data.date, data.category, data.meal_type, data.target)
    if result.failed:
        raise HTTPException(status_code=500, detail="Could not update all entries, please try again")

    entries = await store.query_by_date(data.date)
    summary = aggregate_entries_to_summary(entries).get(data.date) or DailySummary(date=data.date)
    return CellEditResponse(
        date=result.date,
        category=result.category,
        meal_type=result.meal_type,
        previous=result.previous,
        target=result.target,
        value=summary.cell(result.category, result.meal_type),
        created=result.created,
        updated=result.updated,
        deleted=result.deleted,
        shortfall=result.shortfall,
        summary=summary,
    )


@router.put("/{entry_id}")
async def update_entry(
    entry_id: str,
    data: PlateEntryEdit,
    store: LogStore = Depends(get_log_store),
):
    """Change category, meal type or count of an entry"""
    updates = PlateEntryUpdate(**data.model_dump(exclude_none=True))
    if not await store.update_entry(entry_id, updates):
        raise HTTPException(status_code=404, detail="Entry not found")
    return {"message": "Entry updated", "id": entry_id}


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: str,
    store: LogStore = Depends(get_log_store),
):
    """Delete an entry"""
    if not await store.delete_entry(entry_id):
        raise HTTPException(status_code=404, detail="Entry not found")
    return {"message": "Entry deleted"}
