"""
Rate table API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException

from bhojnalay.api.deps import get_rate_store
from bhojnalay.schemas import Rates
from bhojnalay.services.rate_store import RateStore

router = APIRouter()


@router.get("/", response_model=Rates)
async def get_rates(store: RateStore = Depends(get_rate_store)):
    """Global rates (defaults when nothing has been saved)"""
    return await store.load()


@router.put("/", response_model=Rates)
async def save_rates(
    rates: Rates,
    store: RateStore = Depends(get_rate_store),
):
    if not await store.save(rates):
        raise HTTPException(status_code=500, detail="Error saving rates. Please try again.")
    return rates
