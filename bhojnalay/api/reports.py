"""
Report API endpoints - date-range summaries and Excel export
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from typing import List, Optional
import datetime as dt
from pydantic import BaseModel

from bhojnalay.api.deps import get_log_store, get_rate_store, get_special_rate_store
from bhojnalay.schemas import DailySummary, Rates, SpecialDailyRates
from bhojnalay.services.aggregator import aggregate_entries_to_summary, sorted_summaries
from bhojnalay.services.excel_export import export_filename, export_to_excel
from bhojnalay.services.log_store import LogStore
from bhojnalay.services.rate_store import RateStore, SpecialRateStore
from bhojnalay.services.summary_calculator import (
    DailyTotals,
    RangeTotals,
    calculate_daily_totals,
    calculate_range_totals,
)
from bhojnalay.utils.helpers import default_report_range, format_currency
from bhojnalay.utils.logger import get_logger
from bhojnalay.utils.validators import validate_date_range

router = APIRouter()
logger = get_logger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class DayReport(BaseModel):
    summary: DailySummary
    totals: DailyTotals


class RangeReport(BaseModel):
    start_date: dt.date
    end_date: dt.date
    rates: Rates
    special_rates: List[SpecialDailyRates]
    days: List[DayReport]
    totals: RangeTotals
    total_amount_display: str


def _resolve_range(
    start_date: Optional[dt.date],
    end_date: Optional[dt.date],
) -> tuple[dt.date, dt.date]:
    default_start, default_end = default_report_range()
    start_date = start_date or default_start
    end_date = end_date or default_end
    try:
        return validate_date_range(start_date, end_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


async def _load_report_data(
    start_date: dt.date,
    end_date: dt.date,
    store: LogStore,
    rate_store: RateStore,
    special_store: SpecialRateStore,
):
    entries = await store.query_by_date_range(start_date, end_date)
    summaries = sorted_summaries(aggregate_entries_to_summary(entries))
    rates = await rate_store.load()
    special_by_date = await special_store.load_for_range(start_date, end_date)
    return summaries, rates, special_by_date


@router.get("/", response_model=RangeReport)
async def get_report(
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
    store: LogStore = Depends(get_log_store),
    rate_store: RateStore = Depends(get_rate_store),
    special_store: SpecialRateStore = Depends(get_special_rate_store),
):
    """Daily summaries with totals for a date range (default: this month)"""
    start_date, end_date = _resolve_range(start_date, end_date)
    summaries, rates, special_by_date = await _load_report_data(
        start_date, end_date, store, rate_store, special_store
    )

    days = [
        DayReport(
            summary=s,
            totals=calculate_daily_totals(s, rates, special_by_date.get(s.date)),
        )
        for s in summaries
    ]
    totals = calculate_range_totals(summaries, rates, special_by_date)

    return RangeReport(
        start_date=start_date,
        end_date=end_date,
        rates=rates,
        special_rates=[special_by_date[d] for d in sorted(special_by_date)],
        days=days,
        totals=totals,
        total_amount_display=format_currency(totals.grand_amount),
    )


@router.get("/export")
async def export_report(
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
    store: LogStore = Depends(get_log_store),
    rate_store: RateStore = Depends(get_rate_store),
    special_store: SpecialRateStore = Depends(get_special_rate_store),
):
    """Download the date range as an .xlsx workbook"""
    start_date, end_date = _resolve_range(start_date, end_date)
    summaries, rates, special_by_date = await _load_report_data(
        start_date, end_date, store, rate_store, special_store
    )
    if not summaries:
        raise HTTPException(status_code=404, detail="No entries in the selected range")

    content = export_to_excel(summaries, rates, special_by_date)
    filename = export_filename(start_date, end_date)
    logger.info(f"Exported {len(summaries)} day(s) to {filename}")

    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
