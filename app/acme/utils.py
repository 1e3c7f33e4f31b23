from __future__ import annotations

import math
from datetime import date, datetime


def format_currency(amount_cents: int | float | None) -> str:
    """
    Integer cents -> en-US dollar string.

        >>> format_currency(15795)
        '$157.95'
        >>> format_currency(None)
        '$0.00'
    """
    cents = int(amount_cents or 0)
    sign = "-" if cents < 0 else ""
    return f"{sign}${abs(cents) / 100:,.2f}"


def format_date_to_local(value: date | datetime | str) -> str:
    """'2022-12-06' -> 'Dec 6, 2022'."""
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def total_pages(count: int, per_page: int) -> int:
    return math.ceil(count / per_page) if count > 0 else 0


def parse_page(raw: str | None) -> int:
    """Page numbers are 1-based; garbage and anything below 1 means page 1."""
    try:
        page = int((raw or "").strip() or "1")
    except ValueError:
        return 1
    return page if page >= 1 else 1


def generate_pagination(current_page: int, total: int) -> list[int | str]:
    """
    Page links for the table footer, with "..." where pages are skipped.
    """
    if total <= 7:
        return list(range(1, total + 1))

    if current_page <= 3:
        return [1, 2, 3, "...", total - 1, total]

    if current_page >= total - 2:
        return [1, 2, "...", total - 2, total - 1, total]

    return [1, "...", current_page - 1, current_page, current_page + 1, "...", total]
