"""
Rate table models - global meal rates and per-day special rates
"""
from sqlalchemy import Column, Integer, String, Date, Float, DateTime
from datetime import datetime
from bhojnalay.database import Base


class RateRecord(Base):
    """One global rate per meal type, plus the catering headcount default"""
    __tablename__ = "rates"

    id = Column(Integer, primary_key=True, index=True)
    meal_type = Column(String, unique=True, nullable=False)  # meal type or "catering_staff_default"
    rate = Column(Float, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SpecialDailyRate(Base):
    """Rates for the special category on one date"""
    __tablename__ = "special_daily_rates"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, unique=True, nullable=False, index=True)
    navkarshi = Column(Float, nullable=False, default=0)
    lunch = Column(Float, nullable=False, default=0)
    chovihar = Column(Float, nullable=False, default=0)
    tea_coffee = Column(Float, nullable=False, default=0)
    parcel = Column(Float, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
