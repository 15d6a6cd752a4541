"""Date helpers for purchase order fields.

Order dates travel as DD/MM/YYYY strings (the format suppliers print and the
extraction prompt asks for). Range filters arrive as YYYY-MM-DD. The calendar
helpers back the date picker: Sunday-first month grids and month navigation.
"""
import calendar
import re
from datetime import date, datetime

DMY_PATTERN = re.compile(r"^\d{2}/\d{2}/\d{4}$")
YMD_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_PT_MONTHS = ["jan.", "fev.", "mar.", "abr.", "mai.", "jun.",
              "jul.", "ago.", "set.", "out.", "nov.", "dez."]

_CALENDAR = calendar.Calendar(firstweekday=calendar.SUNDAY)


def parse_date(value: str | None) -> date | None:
    """Parse a strict DD/MM/YYYY string. Returns None when it is not one."""
    if not value or not DMY_PATTERN.match(value):
        return None
    day, month, year = (int(p) for p in value.split("/"))
    if month < 1 or month > 12 or day < 1 or day > 31:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_date(value: date) -> str:
    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


def normalize_date(value: str | None) -> str:
    """Best-effort conversion of a date string to DD/MM/YYYY.

    Accepts DD/MM/YYYY (returned as is), ISO dates with or without a time
    part, and DD-MM-YYYY / DD.MM.YYYY. Anything else is returned unchanged.
    """
    if not value or not isinstance(value, str):
        return ""

    if DMY_PATTERN.match(value):
        return value

    try:
        return format_date(datetime.fromisoformat(value.replace("Z", "+00:00")).date())
    except ValueError:
        pass

    parts = re.sub(r"[./]", "-", value).split("-")
    if len(parts) == 3:
        try:
            day, month, year = (int(p) for p in parts)
        except ValueError:
            return value
        if 0 < day <= 31 and 0 < month <= 12 and year > 1900:
            try:
                return format_date(date(year, month, day))
            except ValueError:
                return value

    return value


def ymd_to_dmy(value: str | None) -> str:
    if not value or not YMD_PATTERN.match(value):
        return ""
    year, month, day = value.split("-")
    return f"{day}/{month}/{year}"


def dmy_to_ymd(value: str | None) -> str:
    if not value or not DMY_PATTERN.match(value):
        return ""
    day, month, year = value.split("/")
    return f"{year}-{month}-{day}"


def month_grid(year: int, month: int) -> list[list[int | None]]:
    """Weeks of a month, Sunday first, with None for days outside it."""
    return [
        [day or None for day in week]
        for week in _CALENDAR.monthdayscalendar(year, month)
    ]


def shift_month(value: date, months: int) -> date:
    """Move `value` by whole months, clamping the day to the target month."""
    index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def month_label(key: str, language: str = "pt") -> str:
    """Short label for a YYYY-MM key, e.g. 'Jan. de 2025' or 'Jan 2025'."""
    year, month = (int(p) for p in key.split("-"))
    if language == "pt":
        label = f"{_PT_MONTHS[month - 1]} de {year}"
    else:
        label = f"{calendar.month_abbr[month]} {year}"
    return label[:1].upper() + label[1:]
