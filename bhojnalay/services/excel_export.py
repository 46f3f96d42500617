"""
Excel export of daily summaries.

Builds flat report rows (one per date plus a TOTAL row) and renders them
into an .xlsx workbook with openpyxl.
"""
import io
from datetime import date
from typing import Dict, List, Mapping, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from bhojnalay.config import get_settings
from bhojnalay.schemas import (
    Category,
    DailySummary,
    MEAL_CATEGORIES,
    MealCounts,
    MealType,
    Rates,
    SpecialDailyRates,
)
from bhojnalay.services.summary_calculator import (
    calculate_daily_totals,
    calculate_range_totals,
)

CATEGORY_LABELS = {
    Category.GUEST: "Guest",
    Category.STAFF: "Staff",
    Category.SEVAK: "Sevak",
    Category.SPECIAL: "Special",
    Category.CATERING: "Catering",
}

MEAL_LABELS = {
    MealType.NAVKARSHI: "Navkarshi",
    MealType.LUNCH: "Lunch",
    MealType.CHOVIHAR: "Chovihar",
    MealType.TEA_COFFEE: "Tea/Coffee",
    MealType.PARCEL: "Parcel",
}


def export_columns() -> List[str]:
    columns = ["Date"]
    for category in MEAL_CATEGORIES:
        label = CATEGORY_LABELS[category]
        columns += [f"{label} {MEAL_LABELS[m]}" for m in MealType]
        columns.append(f"{label} Total")
    columns += ["Catering", "Grand Total", "Guest Amount", "Special Amount", "Total Amount"]
    return columns


def _meal_cells(label: str, meals: MealCounts, total: int) -> Dict[str, int]:
    row = {f"{label} {MEAL_LABELS[m]}": meals.get(m) for m in MealType}
    row[f"{label} Total"] = total
    return row


def build_export_rows(
    summaries: Sequence[DailySummary],
    rates: Rates,
    special_rates_by_date: Optional[Mapping[date, SpecialDailyRates]] = None,
) -> List[Dict[str, object]]:
    special_rates_by_date = special_rates_by_date or {}
    rows: List[Dict[str, object]] = []

    for summary in summaries:
        daily = calculate_daily_totals(summary, rates, special_rates_by_date.get(summary.date))
        row: Dict[str, object] = {"Date": summary.date.isoformat()}
        for category in MEAL_CATEGORIES:
            row.update(_meal_cells(
                CATEGORY_LABELS[category],
                summary.meals_for(category),
                getattr(daily, category.value).total,
            ))
        row.update({
            "Catering": daily.catering,
            "Grand Total": daily.grand_total,
            "Guest Amount": daily.guest_amount,
            "Special Amount": daily.special_amount,
            "Total Amount": daily.grand_amount,
        })
        rows.append(row)

    totals = calculate_range_totals(summaries, rates, special_rates_by_date)
    total_row: Dict[str, object] = {"Date": "TOTAL"}
    for category in MEAL_CATEGORIES:
        total_row.update(_meal_cells(
            CATEGORY_LABELS[category],
            totals.meals[category],
            totals.categories[category].total,
        ))
    total_row.update({
        "Catering": totals.catering,
        "Grand Total": totals.grand_total,
        "Guest Amount": totals.guest_amount,
        "Special Amount": totals.special_amount,
        "Total Amount": totals.grand_amount,
    })
    rows.append(total_row)
    return rows


def _write_sheet(ws, columns: List[str], rows: List[Dict[str, object]]) -> None:
    ws.append(columns)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append([row.get(c) for c in columns])
    for idx, column in enumerate(columns, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = max(10, len(column) + 2)


def export_to_excel(
    summaries: Sequence[DailySummary],
    rates: Rates,
    special_rates_by_date: Optional[Mapping[date, SpecialDailyRates]] = None,
) -> bytes:
    """Render the report workbook and return it as .xlsx bytes"""
    special_rates_by_date = special_rates_by_date or {}

    wb = Workbook()
    ws = wb.active
    ws.title = "Plate Count"
    _write_sheet(ws, export_columns(), build_export_rows(summaries, rates, special_rates_by_date))

    rates_rows = [{"Meal": MEAL_LABELS[m], "Rate": rates.rate_for(m)} for m in MealType]
    rates_rows.append({"Meal": "Catering Staff Default", "Rate": rates.catering_staff_default})
    _write_sheet(wb.create_sheet("Rates"), ["Meal", "Rate"], rates_rows)

    if special_rates_by_date:
        special_columns = ["Date"] + [MEAL_LABELS[m] for m in MealType]
        special_rows = []
        for day in sorted(special_rates_by_date):
            special = special_rates_by_date[day]
            row: Dict[str, object] = {"Date": day.isoformat()}
            row.update({MEAL_LABELS[m]: special.rate_for(m) for m in MealType})
            special_rows.append(row)
        _write_sheet(wb.create_sheet("Special Rates"), special_columns, special_rows)

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def export_filename(start_date: date, end_date: date) -> str:
    prefix = get_settings().EXPORT_FILENAME_PREFIX
    return f"{prefix}_{start_date.isoformat()}_to_{end_date.isoformat()}.xlsx"
