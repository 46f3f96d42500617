"""
Reconciler - edits the plate log so a summary cell matches a user-entered total.

Growth is always logged as one new entry. A decrease consumes existing
entries in stored order: an entry that fits inside the remaining reduction
is deleted, the first one that doesn't is reduced and the walk stops.
If the entries run out first, the leftover is reported as a shortfall and
otherwise dropped.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from bhojnalay.schemas import (
    CATERING_MEAL_TYPE,
    Category,
    MealType,
    PlateEntryCreate,
    PlateEntryRead,
    PlateEntryUpdate,
)
from bhojnalay.services.log_store import LogStore
from bhojnalay.utils.helpers import current_time_hhmm
from bhojnalay.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ReconcilePlan:
    date: date
    category: Category
    meal_type: MealType
    current: int
    target: int
    create_count: int = 0
    updates: List[Tuple[str, int]] = field(default_factory=list)   # (entry id, new count)
    deletions: List[str] = field(default_factory=list)
    shortfall: int = 0

    @property
    def is_noop(self) -> bool:
        return not (self.create_count or self.updates or self.deletions)


@dataclass
class ReconcileResult:
    date: date
    category: Category
    meal_type: MealType
    previous: int
    target: int
    created: List[PlateEntryRead] = field(default_factory=list)
    updated: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    shortfall: int = 0


def plan_reduction(
    entries: Sequence[PlateEntryRead],
    amount: int,
) -> Tuple[List[str], List[Tuple[str, int]], int]:
    """Consume `amount` from entries in their given order.

    Returns (ids to delete, (id, new count) updates, shortfall).
    """
    deletions: List[str] = []
    updates: List[Tuple[str, int]] = []
    remaining = amount

    for entry in entries:
        if remaining <= 0:
            break
        if entry.count <= remaining:
            deletions.append(entry.id)
            remaining -= entry.count
        else:
            updates.append((entry.id, entry.count - remaining))
            remaining = 0

    return deletions, updates, max(remaining, 0)


def plan_cell_reconciliation(
    entries: Sequence[PlateEntryRead],
    day: date,
    category: Category,
    meal_type: MealType,
    target: int,
) -> ReconcilePlan:
    """Plan the log edits that bring one (category, meal type) cell to `target`"""
    if target < 0:
        raise ValueError("Target count must not be negative")

    matching = [
        e for e in entries
        if e.date == day and e.category == category and e.meal_type == meal_type
    ]
    current = sum(e.count for e in matching)
    plan = ReconcilePlan(date=day, category=category, meal_type=meal_type,
                         current=current, target=target)

    diff = target - current
    if diff > 0:
        plan.create_count = diff
    elif diff < 0:
        plan.deletions, plan.updates, plan.shortfall = plan_reduction(matching, -diff)
    return plan


def plan_catering_reconciliation(
    entries: Sequence[PlateEntryRead],
    day: date,
    target: int,
) -> ReconcilePlan:
    """Set the catering headcount for a date directly.

    The first catering entry takes the target; any further catering entries
    for the date are removed so the day keeps a single count.
    """
    if target < 0:
        raise ValueError("Target count must not be negative")

    matching = [e for e in entries if e.date == day and e.category == Category.CATERING]
    current = sum(e.count for e in matching)
    plan = ReconcilePlan(date=day, category=Category.CATERING, meal_type=CATERING_MEAL_TYPE,
                         current=current, target=target)

    if not matching:
        if target > 0:
            plan.create_count = target
        return plan

    first, extra = matching[0], matching[1:]
    if first.count != target:
        plan.updates.append((first.id, target))
    plan.deletions = [e.id for e in extra]
    return plan


async def apply_plan(
    store: LogStore,
    plan: ReconcilePlan,
    now: Optional[datetime] = None,
) -> ReconcileResult:
    """Issue the planned store calls one after another"""
    result = ReconcileResult(
        date=plan.date,
        category=plan.category,
        meal_type=plan.meal_type,
        previous=plan.current,
        target=plan.target,
        shortfall=plan.shortfall,
    )

    for entry_id in plan.deletions:
        if await store.delete_entry(entry_id):
            result.deleted.append(entry_id)
        else:
            result.failed.append(entry_id)

    for entry_id, count in plan.updates:
        if await store.update_entry(entry_id, PlateEntryUpdate(count=count)):
            result.updated.append(entry_id)
        else:
            result.failed.append(entry_id)

    if plan.create_count > 0:
        created = await store.add_entry(PlateEntryCreate(
            date=plan.date,
            time=current_time_hhmm(now),
            category=plan.category,
            meal_type=plan.meal_type,
            count=plan.create_count,
        ))
        if created:
            result.created.append(created)

    if plan.shortfall:
        logger.warning(
            f"Reconciliation shortfall for {plan.date} {plan.category.value}/"
            f"{plan.meal_type.value}: {plan.shortfall} could not be removed"
        )
    if result.failed:
        logger.warning(f"Reconciliation could not modify entries: {result.failed}")
    if not plan.is_noop:
        logger.info(
            f"Reconciled {plan.date} {plan.category.value}/{plan.meal_type.value}: "
            f"{plan.current} -> {plan.target} (created={len(result.created)}, "
            f"updated={len(result.updated)}, deleted={len(result.deleted)})"
        )
    return result


async def reconcile_cell(
    store: LogStore,
    day: date,
    category: Category,
    meal_type: MealType,
    target: int,
    now: Optional[datetime] = None,
) -> ReconcileResult:
    """Bring the aggregated value of one summary cell to `target`.

    Catering ignores `meal_type` and sets the day's headcount directly.
    """
    entries = await store.query_by_date(day)
    if category == Category.CATERING:
        plan = plan_catering_reconciliation(entries, day, target)
    else:
        plan = plan_cell_reconciliation(entries, day, category, meal_type, target)
    return await apply_plan(store, plan, now=now)
