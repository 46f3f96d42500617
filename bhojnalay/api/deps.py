"""
Store dependencies - remote datastore with local fallback, or local only
"""
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bhojnalay.config import get_settings
from bhojnalay.database import get_db
from bhojnalay.services.local_storage import LocalStorage
from bhojnalay.services.log_store import FallbackLogStore, LocalLogStore, LogStore, SqlLogStore
from bhojnalay.services.rate_store import (
    FallbackRateStore,
    FallbackSpecialRateStore,
    LocalRateStore,
    LocalSpecialRateStore,
    RateStore,
    SpecialRateStore,
    SqlRateStore,
    SqlSpecialRateStore,
)


def get_local_storage() -> LocalStorage:
    return LocalStorage(get_settings().LOCAL_STORE_PATH)


async def get_log_store(
    db: Optional[AsyncSession] = Depends(get_db),
    storage: LocalStorage = Depends(get_local_storage),
) -> LogStore:
    local = LocalLogStore(storage)
    if db is None:
        return local
    return FallbackLogStore(SqlLogStore(db), local)


async def get_rate_store(
    db: Optional[AsyncSession] = Depends(get_db),
    storage: LocalStorage = Depends(get_local_storage),
) -> RateStore:
    local = LocalRateStore(storage)
    if db is None:
        return local
    return FallbackRateStore(SqlRateStore(db), local)


async def get_special_rate_store(
    db: Optional[AsyncSession] = Depends(get_db),
    storage: LocalStorage = Depends(get_local_storage),
) -> SpecialRateStore:
    local = LocalSpecialRateStore(storage)
    if db is None:
        return local
    return FallbackSpecialRateStore(SqlSpecialRateStore(db), local)
