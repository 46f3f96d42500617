"""
Rate Table and Special Daily Rate Table stores (remote, local, fallback)
"""
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import date
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bhojnalay.models.rates import RateRecord, SpecialDailyRate
from bhojnalay.schemas import DEFAULT_RATES, MealRates, MealType, Rates, SpecialDailyRates
from bhojnalay.services.fallback import FallbackStore
from bhojnalay.services.local_storage import LocalStorage, RATES_KEY, SPECIAL_RATES_KEY
from bhojnalay.utils.logger import get_logger

logger = get_logger(__name__)

CATERING_DEFAULT_KEY = "catering_staff_default"


class RateStore(ABC):
    @abstractmethod
    async def load(self) -> Optional[Rates]:
        """Current rate table; None means the store holds nothing"""

    @abstractmethod
    async def save(self, rates: Rates) -> bool:
        pass


class SpecialRateStore(ABC):
    @abstractmethod
    async def load_for_date(self, day: date) -> Optional[SpecialDailyRates]:
        pass

    @abstractmethod
    async def save_for_date(self, day: date, rates: MealRates) -> bool:
        pass

    @abstractmethod
    async def load_for_range(self, start: date, end: date) -> Dict[date, SpecialDailyRates]:
        pass


class _SqlStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _guard(self):
        try:
            yield
        except SQLAlchemyError:
            await self.db.rollback()
            raise


# --- Global rates ---

class SqlRateStore(_SqlStore, RateStore):

    async def load(self) -> Optional[Rates]:
        async with self._guard():
            result = await self.db.execute(select(RateRecord))
            records = result.scalars().all()
        if not records:
            return None

        # Stored rows overlay the defaults
        values = DEFAULT_RATES.model_dump()
        for record in records:
            if record.meal_type in values:
                values[record.meal_type] = record.rate
        values[CATERING_DEFAULT_KEY] = int(values[CATERING_DEFAULT_KEY])
        return Rates(**values)

    async def save(self, rates: Rates) -> bool:
        values = rates.model_dump()
        async with self._guard():
            result = await self.db.execute(select(RateRecord))
            existing = {r.meal_type: r for r in result.scalars().all()}
            for key in [m.value for m in MealType] + [CATERING_DEFAULT_KEY]:
                record = existing.get(key)
                if record:
                    record.rate = values[key]
                else:
                    self.db.add(RateRecord(meal_type=key, rate=values[key]))
            await self.db.commit()
        return True


class LocalRateStore(RateStore):
    def __init__(self, storage: LocalStorage):
        self.storage = storage

    async def load(self) -> Rates:
        data = self.storage.get(RATES_KEY)
        if not data:
            return DEFAULT_RATES.model_copy()
        return Rates(**data)

    async def save(self, rates: Rates) -> bool:
        return self.storage.set(RATES_KEY, rates.model_dump())


class FallbackRateStore(FallbackStore, RateStore):

    async def load(self) -> Rates:
        rates = await self._call("load")
        if rates is None:
            logger.info("No rates stored remotely, using local rates")
            return await self.fallback.load()
        return rates

    async def save(self, rates: Rates) -> bool:
        return await self._call("save", rates)


# --- Special daily rates ---

def _special_from_row(row: SpecialDailyRate) -> SpecialDailyRates:
    return SpecialDailyRates(
        date=row.date,
        **{m.value: getattr(row, m.value) for m in MealType},
    )


class SqlSpecialRateStore(_SqlStore, SpecialRateStore):

    async def load_for_date(self, day: date) -> Optional[SpecialDailyRates]:
        async with self._guard():
            result = await self.db.execute(
                select(SpecialDailyRate).where(SpecialDailyRate.date == day)
            )
            row = result.scalar_one_or_none()
        return _special_from_row(row) if row else None

    async def save_for_date(self, day: date, rates: MealRates) -> bool:
        values = rates.meal_rates().model_dump()
        async with self._guard():
            result = await self.db.execute(
                select(SpecialDailyRate).where(SpecialDailyRate.date == day)
            )
            row = result.scalar_one_or_none()
            if row:
                for key, value in values.items():
                    setattr(row, key, value)
            else:
                self.db.add(SpecialDailyRate(date=day, **values))
            await self.db.commit()
        return True

    async def load_for_range(self, start: date, end: date) -> Dict[date, SpecialDailyRates]:
        async with self._guard():
            result = await self.db.execute(
                select(SpecialDailyRate)
                .where(SpecialDailyRate.date >= start, SpecialDailyRate.date <= end)
                .order_by(SpecialDailyRate.date.asc())
            )
            rows = result.scalars().all()
        return {row.date: _special_from_row(row) for row in rows}


class LocalSpecialRateStore(SpecialRateStore):
    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def _load_all(self) -> Dict[str, dict]:
        return self.storage.get(SPECIAL_RATES_KEY, {})

    async def load_for_date(self, day: date) -> Optional[SpecialDailyRates]:
        data = self._load_all().get(day.isoformat())
        return SpecialDailyRates(**data) if data else None

    async def save_for_date(self, day: date, rates: MealRates) -> bool:
        all_rates = self._load_all()
        record = SpecialDailyRates(date=day, **rates.meal_rates().model_dump())
        all_rates[day.isoformat()] = record.model_dump(mode="json")
        return self.storage.set(SPECIAL_RATES_KEY, all_rates)

    async def load_for_range(self, start: date, end: date) -> Dict[date, SpecialDailyRates]:
        result = {}
        for key, data in sorted(self._load_all().items()):
            day = date.fromisoformat(key)
            if start <= day <= end:
                result[day] = SpecialDailyRates(**data)
        return result


class FallbackSpecialRateStore(FallbackStore, SpecialRateStore):

    async def load_for_date(self, day: date) -> Optional[SpecialDailyRates]:
        return await self._call("load_for_date", day)

    async def save_for_date(self, day: date, rates: MealRates) -> bool:
        return await self._call("save_for_date", day, rates)

    async def load_for_range(self, start: date, end: date) -> Dict[date, SpecialDailyRates]:
        return await self._call("load_for_range", start, end)
