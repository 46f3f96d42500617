"""
Aggregator - folds plate entries into one DailySummary per date
"""
from datetime import date
from typing import Dict, Iterable, List

from bhojnalay.schemas import Category, DailySummary, PlateEntryRead


def aggregate_entries_to_summary(entries: Iterable[PlateEntryRead]) -> Dict[date, DailySummary]:
    """Sum entry counts per date, category and meal type.

    Catering is a single count per date, so its meal type is ignored.
    """
    summaries: Dict[date, DailySummary] = {}

    for entry in entries:
        summary = summaries.get(entry.date)
        if summary is None:
            summary = DailySummary(date=entry.date)
            summaries[entry.date] = summary

        if entry.category == Category.CATERING:
            summary.catering += entry.count
        else:
            summary.meals_for(entry.category).add(entry.meal_type, entry.count)

    return summaries


def sorted_summaries(summaries: Dict[date, DailySummary]) -> List[DailySummary]:
    return [summaries[d] for d in sorted(summaries)]
