"""
Shared test helpers
"""
from datetime import date, datetime
from itertools import count as _counter
from typing import Optional

from sqlalchemy.exc import OperationalError

from bhojnalay.schemas import CATERING_MEAL_TYPE, Category, MealType, PlateEntryRead

DAY = date(2024, 3, 15)

_ids = _counter(1)


def make_entry(
    count: int,
    category: Category = Category.GUEST,
    meal_type: MealType = MealType.LUNCH,
    day: date = DAY,
    time: str = "12:00",
    entry_id: Optional[str] = None,
) -> PlateEntryRead:
    """Build a stored-looking plate entry"""
    seq = next(_ids)
    if category == Category.CATERING:
        meal_type = CATERING_MEAL_TYPE
    return PlateEntryRead(
        id=entry_id or f"e{seq}",
        date=day,
        time=time,
        category=category,
        meal_type=meal_type,
        count=count,
        created_at=datetime(2024, 1, 1),
    )


class BrokenRemote:
    """Stands in for a remote store whose every call fails"""

    def __getattr__(self, name):
        async def fail(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))
        return fail
