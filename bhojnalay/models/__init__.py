from bhojnalay.models.plate_entry import PlateEntry
from bhojnalay.models.rates import RateRecord, SpecialDailyRate

__all__ = [
    "PlateEntry",
    "RateRecord",
    "SpecialDailyRate",
]
