"""
Log Store - ordered collection of plate entries.

Three interchangeable implementations share one interface:
SqlLogStore (remote datastore), LocalLogStore (JSON file) and
FallbackLogStore (remote first, local when the remote call errors).
"""
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bhojnalay.models.plate_entry import PlateEntry
from bhojnalay.schemas import PlateEntryCreate, PlateEntryRead, PlateEntryUpdate
from bhojnalay.services.fallback import FallbackStore
from bhojnalay.services.local_storage import LocalStorage, PLATE_ENTRIES_KEY
from bhojnalay.utils.helpers import generate_entry_id


def new_entry(entry: PlateEntryCreate, created_at: Optional[datetime] = None) -> PlateEntryRead:
    """Assign id and creation timestamp to an entry about to be stored"""
    return PlateEntryRead(
        id=generate_entry_id(),
        created_at=created_at or datetime.utcnow(),
        **entry.model_dump(),
    )


class LogStore(ABC):

    async def add_entry(self, entry: PlateEntryCreate) -> Optional[PlateEntryRead]:
        return await self.insert(new_entry(entry))

    @abstractmethod
    async def insert(self, entry: PlateEntryRead) -> Optional[PlateEntryRead]:
        """Store an entry that already carries id and created_at"""

    @abstractmethod
    async def query_by_date(self, day: date) -> List[PlateEntryRead]:
        """Entries for one date, ordered by time ascending"""

    @abstractmethod
    async def query_by_date_range(self, start: date, end: date) -> List[PlateEntryRead]:
        """Entries within [start, end], ordered by date then time"""

    @abstractmethod
    async def update_entry(self, entry_id: str, updates: PlateEntryUpdate) -> bool:
        pass

    @abstractmethod
    async def delete_entry(self, entry_id: str) -> bool:
        pass


class SqlLogStore(LogStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _guard(self):
        try:
            yield
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def insert(self, entry: PlateEntryRead) -> Optional[PlateEntryRead]:
        async with self._guard():
            self.db.add(PlateEntry(**entry.model_dump()))
            await self.db.commit()
        return entry

    async def query_by_date(self, day: date) -> List[PlateEntryRead]:
        async with self._guard():
            result = await self.db.execute(
                select(PlateEntry)
                .where(PlateEntry.date == day)
                .order_by(PlateEntry.time.asc(), PlateEntry.created_at.asc())
            )
            rows = result.scalars().all()
        return [PlateEntryRead.model_validate(r) for r in rows]

    async def query_by_date_range(self, start: date, end: date) -> List[PlateEntryRead]:
        async with self._guard():
            result = await self.db.execute(
                select(PlateEntry)
                .where(PlateEntry.date >= start, PlateEntry.date <= end)
                .order_by(
                    PlateEntry.date.asc(),
                    PlateEntry.time.asc(),
                    PlateEntry.created_at.asc(),
                )
            )
            rows = result.scalars().all()
        return [PlateEntryRead.model_validate(r) for r in rows]

    async def update_entry(self, entry_id: str, updates: PlateEntryUpdate) -> bool:
        async with self._guard():
            row = await self.db.get(PlateEntry, entry_id)
            if row is None:
                return False
            for key, value in updates.model_dump(exclude_none=True).items():
                setattr(row, key, value)
            await self.db.commit()
        return True

    async def delete_entry(self, entry_id: str) -> bool:
        async with self._guard():
            row = await self.db.get(PlateEntry, entry_id)
            if row is None:
                return False
            await self.db.delete(row)
            await self.db.commit()
        return True


class LocalLogStore(LogStore):
    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def _load(self) -> List[PlateEntryRead]:
        return [PlateEntryRead.model_validate(d) for d in self.storage.get(PLATE_ENTRIES_KEY, [])]

    def _save(self, entries: List[PlateEntryRead]) -> bool:
        return self.storage.set(PLATE_ENTRIES_KEY, [e.model_dump(mode="json") for e in entries])

    async def insert(self, entry: PlateEntryRead) -> Optional[PlateEntryRead]:
        entries = self._load()
        entries.append(entry)
        return entry if self._save(entries) else None

    # sorted() is stable, so insertion order breaks ties on equal times
    async def query_by_date(self, day: date) -> List[PlateEntryRead]:
        entries = [e for e in self._load() if e.date == day]
        return sorted(entries, key=lambda e: e.time)

    async def query_by_date_range(self, start: date, end: date) -> List[PlateEntryRead]:
        entries = [e for e in self._load() if start <= e.date <= end]
        return sorted(entries, key=lambda e: (e.date, e.time))

    async def update_entry(self, entry_id: str, updates: PlateEntryUpdate) -> bool:
        entries = self._load()
        for i, e in enumerate(entries):
            if e.id == entry_id:
                entries[i] = e.apply(updates)
                return self._save(entries)
        return False

    async def delete_entry(self, entry_id: str) -> bool:
        entries = self._load()
        remaining = [e for e in entries if e.id != entry_id]
        if len(remaining) == len(entries):
            return False
        return self._save(remaining)


class FallbackLogStore(FallbackStore, LogStore):
    """Remote log store that retries a failed call against local storage"""

    async def insert(self, entry: PlateEntryRead) -> Optional[PlateEntryRead]:
        return await self._call("insert", entry)

    async def query_by_date(self, day: date) -> List[PlateEntryRead]:
        return await self._call("query_by_date", day)

    async def query_by_date_range(self, start: date, end: date) -> List[PlateEntryRead]:
        return await self._call("query_by_date_range", start, end)

    async def update_entry(self, entry_id: str, updates: PlateEntryUpdate) -> bool:
        return await self._call_or_fallback("update_entry", entry_id, updates)

    async def delete_entry(self, entry_id: str) -> bool:
        return await self._call_or_fallback("delete_entry", entry_id)
