"""
Plate entry model - one logged count of plates served
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, Enum as SQLEnum
from datetime import datetime
from bhojnalay.database import Base
from bhojnalay.schemas import Category, MealType


class PlateEntry(Base):
    """Individual plate-count log row; the source of truth for all summaries"""
    __tablename__ = "plate_entries"

    id = Column(String, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)           # "HH:MM"
    category = Column(SQLEnum(Category, native_enum=False), nullable=False)
    meal_type = Column(SQLEnum(MealType, native_enum=False), nullable=False)  # placeholder for catering
    count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
