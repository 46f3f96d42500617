"""
General helper utilities
"""
from datetime import date, datetime
from typing import Optional
from uuid import uuid4

from bhojnalay.config import get_settings


def format_currency(amount: float) -> str:
    """Format amount in the configured currency (whole rupees when integral)"""
    symbol = get_settings().CURRENCY_SYMBOL
    if float(amount).is_integer():
        return f"{symbol}{int(amount):,}"
    return f"{symbol}{amount:,.2f}"


def generate_entry_id() -> str:
    """Opaque unique id for a plate entry"""
    return uuid4().hex


def current_time_hhmm(now: Optional[datetime] = None) -> str:
    """Time of day as HH:MM"""
    return (now or datetime.now()).strftime("%H:%M")


def default_report_range(today: Optional[date] = None) -> tuple[date, date]:
    """First day of the current month through today"""
    today = today or date.today()
    return today.replace(day=1), today
