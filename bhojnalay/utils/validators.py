"""
Input validation utilities
"""
from datetime import date, datetime


def validate_time_string(value: str) -> str:
    """Validate a time of day in HH:MM form"""
    try:
        parsed = datetime.strptime(value, "%H:%M")
    except (TypeError, ValueError):
        raise ValueError("Time must be in HH:MM format")
    return parsed.strftime("%H:%M")


def validate_count(count: int) -> int:
    """Counts logged from the entry surface must be positive"""
    if count <= 0:
        raise ValueError("Count must be greater than zero")
    return count


def validate_date_range(start_date: date, end_date: date) -> tuple[date, date]:
    """Validate start is not after end"""
    if start_date > end_date:
        raise ValueError("start_date must be on or before end_date")
    return start_date, end_date
