import calendar
import datetime
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

# 2-decimal money, 6-decimal rates (matches DecimalField definitions)
CENT = Decimal("0.01")
RATE_PLACES = Decimal("0.000001")
ZERO = Decimal("0.00")


def to_decimal(value, default=ZERO):
    """Coerce ints/floats/strings ("1.234,50" included) into Decimal."""
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # go through str() so 0.1 stays 0.1
        return Decimal(str(value))
    if isinstance(value, int):
        return Decimal(value)
    text = str(value).strip().replace(" ", "")
    # Turkish spreadsheets use "." for thousands and "," for decimals
    if "," in text and "." in text:
        text = text.replace(".", "").replace(",", ".")
    elif "," in text:
        text = text.replace(",", ".")
    try:
        return Decimal(text)
    except InvalidOperation:
        return default


def quantize_money(value):
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def quantize_rate(value):
    return to_decimal(value).quantize(RATE_PLACES, rounding=ROUND_HALF_UP)


_WS = re.compile(r"\s+")


def normalize_category(name):
    """
    Single normalization used to match ledger categories,
    budget categories and templates: trimmed, casefolded,
    inner whitespace collapsed.
    """
    if not name:
        return ""
    return _WS.sub(" ", str(name)).strip().casefold()


def add_months(date, months):
    # clamp the day (Jan 31 + 1 month -> Feb 28/29)
    month_index = date.month - 1 + months
    year = date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(date.day, calendar.monthrange(year, month)[1])
    return datetime.date(year, month, day)


def month_starts(start_date, end_date):
    """Every monthly step from start_date up to and including end_date."""
    months = []
    current = start_date
    step = 0
    while current <= end_date:
        months.append(current)
        step += 1
        current = add_months(start_date, step)
    return months


def months_between(earlier, later):
    """Whole months elapsed from `earlier` to `later` (0 when later <= earlier)."""
    if later <= earlier:
        return 0
    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    if later.day < earlier.day:
        months -= 1
    return max(months, 0)
