"""
Store tests - local JSON, SQL and remote-with-fallback implementations.
"""
from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from bhojnalay.schemas import (
    Category,
    DEFAULT_RATES,
    MealRates,
    MealType,
    PlateEntryCreate,
    PlateEntryUpdate,
    Rates,
)
from bhojnalay.services.local_storage import LocalStorage, PLATE_ENTRIES_KEY
from bhojnalay.services.log_store import FallbackLogStore, LocalLogStore, SqlLogStore
from bhojnalay.services.rate_store import (
    FallbackRateStore,
    FallbackSpecialRateStore,
    LocalRateStore,
    LocalSpecialRateStore,
    SqlRateStore,
    SqlSpecialRateStore,
)
from bhojnalay.services.reconciler import reconcile_cell
from bhojnalay.tests.helpers import DAY, BrokenRemote


class _QueryFails(SqlLogStore):
    """Remote store whose reads fail while writes still go through"""

    async def query_by_date(self, day):
        raise OperationalError("SELECT 1", {}, Exception("timeout"))


def _new(count=1, day=DAY, time="12:00", category=Category.GUEST, meal_type=MealType.LUNCH):
    return PlateEntryCreate(date=day, time=time, category=category, meal_type=meal_type, count=count)


# ===================== LOCAL STORAGE =====================


def test_local_storage_missing_file_returns_default(tmp_path):
    storage = LocalStorage(tmp_path / "nothing.json")
    assert storage.get("anything", []) == []


def test_local_storage_corrupt_file_returns_default(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    assert LocalStorage(path).get(PLATE_ENTRIES_KEY, []) == []


def test_local_storage_keys_are_independent(local_storage):
    local_storage.set("a", [1, 2])
    local_storage.set("b", {"x": 1})
    assert local_storage.get("a") == [1, 2]
    assert local_storage.get("b") == {"x": 1}


def _unwritable(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    return LocalStorage(blocker / "store.json")


def test_local_storage_write_failure_returns_false(tmp_path):
    storage = _unwritable(tmp_path)
    assert storage.set("a", [1]) is False
    assert storage.get("a") is None


# ===================== ENTRY SCHEMA =====================


def test_meal_type_required_outside_catering():
    with pytest.raises(ValidationError):
        PlateEntryCreate(date=DAY, time="12:00", category=Category.GUEST, count=1)


def test_catering_gets_placeholder_meal_type():
    entry = PlateEntryCreate(date=DAY, time="12:00", category=Category.CATERING, count=9)
    assert entry.meal_type == MealType.LUNCH


# ===================== LOG STORES =====================


class TestLocalLogStore:

    async def test_add_assigns_id_and_timestamp(self, local_storage):
        store = LocalLogStore(local_storage)
        entry = await store.add_entry(_new(3))
        assert entry.id
        assert entry.created_at is not None
        assert (await store.query_by_date(DAY))[0].id == entry.id

    async def test_query_orders_by_time_then_insertion(self, local_storage):
        store = LocalLogStore(local_storage)
        late = await store.add_entry(_new(1, time="19:00"))
        first_noon = await store.add_entry(_new(2, time="12:00"))
        second_noon = await store.add_entry(_new(3, time="12:00"))
        ids = [e.id for e in await store.query_by_date(DAY)]
        assert ids == [first_noon.id, second_noon.id, late.id]

    async def test_range_is_inclusive_and_sorted(self, local_storage):
        store = LocalLogStore(local_storage)
        for day in (date(2024, 3, 3), date(2024, 3, 1), date(2024, 3, 5), date(2024, 2, 28)):
            await store.add_entry(_new(day=day))
        entries = await store.query_by_date_range(date(2024, 3, 1), date(2024, 3, 3))
        assert [e.date for e in entries] == [date(2024, 3, 1), date(2024, 3, 3)]

    async def test_update_and_delete(self, local_storage):
        store = LocalLogStore(local_storage)
        entry = await store.add_entry(_new(3))

        assert await store.update_entry(entry.id, PlateEntryUpdate(count=7, category=Category.STAFF))
        stored = (await store.query_by_date(DAY))[0]
        assert stored.count == 7
        assert stored.category == Category.STAFF
        assert stored.meal_type == MealType.LUNCH

        assert await store.delete_entry(entry.id)
        assert await store.query_by_date(DAY) == []

    async def test_missing_entry(self, local_storage):
        store = LocalLogStore(local_storage)
        assert not await store.update_entry("nope", PlateEntryUpdate(count=1))
        assert not await store.delete_entry("nope")


class TestSqlLogStore:

    async def test_round_trip(self, db_session):
        store = SqlLogStore(db_session)
        entry = await store.add_entry(_new(4, category=Category.SPECIAL, meal_type=MealType.PARCEL))

        stored = await store.query_by_date(DAY)
        assert len(stored) == 1
        assert stored[0].id == entry.id
        assert stored[0].category == Category.SPECIAL
        assert stored[0].meal_type == MealType.PARCEL

    async def test_orders_by_date_then_time(self, db_session):
        store = SqlLogStore(db_session)
        await store.add_entry(_new(day=date(2024, 3, 2), time="08:00"))
        await store.add_entry(_new(day=date(2024, 3, 1), time="20:00"))
        await store.add_entry(_new(day=date(2024, 3, 1), time="07:30"))
        entries = await store.query_by_date_range(date(2024, 3, 1), date(2024, 3, 2))
        assert [(e.date.day, e.time) for e in entries] == [(1, "07:30"), (1, "20:00"), (2, "08:00")]

    async def test_update_and_delete(self, db_session):
        store = SqlLogStore(db_session)
        entry = await store.add_entry(_new(5))
        assert await store.update_entry(entry.id, PlateEntryUpdate(count=2))
        assert (await store.query_by_date(DAY))[0].count == 2
        assert await store.delete_entry(entry.id)
        assert not await store.delete_entry(entry.id)
        assert not await store.update_entry(entry.id, PlateEntryUpdate(count=1))


class TestFallbackLogStore:

    async def test_failed_remote_calls_use_local(self, local_storage):
        local = LocalLogStore(local_storage)
        store = FallbackLogStore(BrokenRemote(), local)

        entry = await store.add_entry(_new(6))
        assert entry is not None
        assert [e.id for e in await local.query_by_date(DAY)] == [entry.id]
        assert [e.id for e in await store.query_by_date(DAY)] == [entry.id]
        assert await store.update_entry(entry.id, PlateEntryUpdate(count=1))
        assert await store.delete_entry(entry.id)
        assert await store.query_by_date_range(DAY, DAY) == []

    async def test_healthy_remote_is_used(self, db_session, local_storage):
        local = LocalLogStore(local_storage)
        store = FallbackLogStore(SqlLogStore(db_session), local)
        await store.add_entry(_new(2))
        assert len(await SqlLogStore(db_session).query_by_date(DAY)) == 1
        assert await local.query_by_date(DAY) == []

    async def test_local_entries_editable_once_remote_is_back(self, db_session, local_storage):
        local = LocalLogStore(local_storage)
        offline = await FallbackLogStore(BrokenRemote(), local).add_entry(_new(5))

        store = FallbackLogStore(SqlLogStore(db_session), local)
        assert await store.update_entry(offline.id, PlateEntryUpdate(count=2))
        assert (await local.query_by_date(DAY))[0].count == 2
        assert await store.delete_entry(offline.id)
        assert await local.query_by_date(DAY) == []
        assert not await store.delete_entry(offline.id)

    async def test_reconcile_when_only_the_remote_query_fails(self, db_session, local_storage):
        local = LocalLogStore(local_storage)
        await local.add_entry(_new(3, time="08:00"))
        await local.add_entry(_new(4, time="09:00"))
        store = FallbackLogStore(_QueryFails(db_session), local)

        result = await reconcile_cell(store, DAY, Category.GUEST, MealType.LUNCH, 2)

        assert result.failed == []
        assert [e.count for e in await local.query_by_date(DAY)] == [2]

    async def test_both_stores_failing_reports_failure(self, tmp_path):
        store = FallbackLogStore(BrokenRemote(), LocalLogStore(_unwritable(tmp_path)))
        assert await store.add_entry(_new(2)) is None
        assert await store.query_by_date(DAY) == []


# ===================== RATE STORES =====================


class TestRateStores:

    async def test_local_defaults_then_saved(self, local_storage):
        store = LocalRateStore(local_storage)
        assert await store.load() == DEFAULT_RATES

        custom = Rates(navkarshi=40, lunch=90, chovihar=45, tea_coffee=15, parcel=25,
                       catering_staff_default=12)
        assert await store.save(custom)
        assert await store.load() == custom

    async def test_sql_empty_returns_none(self, db_session):
        assert await SqlRateStore(db_session).load() is None

    async def test_sql_round_trip_and_upsert(self, db_session):
        store = SqlRateStore(db_session)
        await store.save(Rates(lunch=120, catering_staff_default=8))
        await store.save(Rates(lunch=130, catering_staff_default=9))
        loaded = await store.load()
        assert loaded.lunch == 130
        assert loaded.catering_staff_default == 9
        assert loaded.navkarshi == DEFAULT_RATES.navkarshi

    async def test_fallback_uses_local_when_remote_empty(self, db_session, local_storage):
        local = LocalRateStore(local_storage)
        await local.save(Rates(lunch=77))
        store = FallbackRateStore(SqlRateStore(db_session), local)
        assert (await store.load()).lunch == 77

    async def test_fallback_on_remote_error(self, local_storage):
        store = FallbackRateStore(BrokenRemote(), LocalRateStore(local_storage))
        assert await store.save(Rates(parcel=33))
        assert (await store.load()).parcel == 33


class TestSpecialRateStores:

    async def test_local_absent_date(self, local_storage):
        assert await LocalSpecialRateStore(local_storage).load_for_date(DAY) is None

    async def test_local_save_and_range(self, local_storage):
        store = LocalSpecialRateStore(local_storage)
        await store.save_for_date(date(2024, 3, 1), MealRates(lunch=60))
        await store.save_for_date(date(2024, 3, 9), MealRates(lunch=70))
        await store.save_for_date(date(2024, 4, 1), MealRates(lunch=80))

        assert (await store.load_for_date(date(2024, 3, 9))).lunch == 70
        in_march = await store.load_for_range(date(2024, 3, 1), date(2024, 3, 31))
        assert sorted(in_march) == [date(2024, 3, 1), date(2024, 3, 9)]

    async def test_sql_save_overwrites(self, db_session):
        store = SqlSpecialRateStore(db_session)
        await store.save_for_date(DAY, MealRates(lunch=60))
        await store.save_for_date(DAY, MealRates(lunch=65, tea_coffee=5))
        loaded = await store.load_for_date(DAY)
        assert loaded.lunch == 65
        assert loaded.tea_coffee == 5
        assert list(await store.load_for_range(DAY, DAY)) == [DAY]

    async def test_fallback_on_remote_error(self, local_storage):
        store = FallbackSpecialRateStore(BrokenRemote(), LocalSpecialRateStore(local_storage))
        assert await store.save_for_date(DAY, MealRates(navkarshi=11))
        assert (await store.load_for_date(DAY)).navkarshi == 11
