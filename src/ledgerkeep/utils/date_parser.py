"""Date parsing utilities."""

import re
from datetime import date, timedelta

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from ledgerkeep.domain.errors import ValidationError

# Dotted dates ("15.01.2024") are day-first, as ledger exports write them.
_DOTTED = re.compile(r"^\d{1,2}\.\d{1,2}\.\d{2,4}$")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports:
    - ISO and free-form dates: "2024-01-15", "January 15, 2024"
    - Day-first dotted dates: "15.01.2024"
    - Relative dates: "today", "yesterday", "N days ago", "last month"

    Raises:
        ValidationError: If date string cannot be parsed
    """
    text = (date_str or "").strip().lower()
    if not text:
        raise ValidationError("Empty date string")
    today = date.today()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)
    if text == "last month":
        return (today - relativedelta(months=1)).replace(day=1)
    if text == "this month":
        return today.replace(day=1)
    if text == "this year":
        return today.replace(month=1, day=1)

    match = re.fullmatch(r"(\d+) days? ago", text)
    if match:
        return today - timedelta(days=int(match.group(1)))

    try:
        return date_parser.parse(text, dayfirst=bool(_DOTTED.match(text))).date()
    except (ValueError, OverflowError) as e:
        raise ValidationError(f"Could not parse date '{date_str}'") from e
