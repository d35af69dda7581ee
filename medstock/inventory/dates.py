from __future__ import annotations

from datetime import date, datetime

from medstock.core.config import get_settings


def parse_date(text: str, fmt: str | None = None) -> date:
    pattern = fmt or get_settings().date_format
    return datetime.strptime(text.strip(), pattern).date()


def format_date(value: date, fmt: str | None = None) -> str:
    pattern = fmt or get_settings().date_format
    return value.strftime(pattern)


def today() -> date:
    return date.today()
