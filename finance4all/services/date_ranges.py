"""
Calendar helpers for analytics date windows.

All ranges are inclusive on both ends and expressed as ``date`` objects,
matching how transaction dates are stored.
"""
import calendar
import re
from datetime import date
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta


DateRange = Tuple[date, date]

_LAST_N_MONTHS = re.compile(r'^last_(\d{1,3})_months?$')


def get_date_range(months: int, today: Optional[date] = None) -> DateRange:
    """The trailing window ending today and starting ``months`` calendar months earlier"""
    if months < 0:
        raise ValueError("months must be non-negative")
    end = today or date.today()
    # relativedelta clamps to the last day of shorter months (Mar 31 - 1 month = Feb 28/29)
    return end - relativedelta(months=months), end


def get_current_month_range(today: Optional[date] = None) -> DateRange:
    today = today or date.today()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def get_year_to_date_range(today: Optional[date] = None) -> DateRange:
    today = today or date.today()
    return date(today.year, 1, 1), today


def resolve_named_range(name: str, today: Optional[date] = None) -> DateRange:
    """
    Map a range keyword onto dates.

    Supported: ``current_month``, ``year_to_date`` and ``last_N_months``.
    """
    name = name.strip().lower()
    if name == "current_month":
        return get_current_month_range(today)
    if name == "year_to_date":
        return get_year_to_date_range(today)

    match = _LAST_N_MONTHS.match(name)
    if match:
        return get_date_range(int(match.group(1)), today)

    raise ValueError(f"Unknown date range '{name}'")
