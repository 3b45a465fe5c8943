"""
Booking conversation state: date normalisation, merging extracted details
and working out which stage the conversation is in
"""
import calendar
import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Optional

logger = logging.getLogger(__name__)

STAGE_DISCOVERY = "discovery"
STAGE_VENDOR_SEARCH = "vendor_search"
STAGE_CONFIRMATION = "confirmation"
STAGE_COMPLETED = "completed"

MONTHS = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_NEXT_WEEKDAY = re.compile(r"^next\s+(" + "|".join(WEEKDAYS) + r")$")
_ORDINAL = re.compile(r"^(\d+)(st|nd|rd|th)$")
_TIME = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?\s*([ap])?\.?\s*(m\.?)?\s*$", re.IGNORECASE)
_AMOUNT = re.compile(r"\d[\d,]*(?:\.\d+)?")


def _add_month(day: date) -> date:
    year = day.year + (1 if day.month == 12 else 0)
    month = 1 if day.month == 12 else day.month + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def normalize_date(value: str, today: Optional[date] = None) -> Optional[str]:
    """
    Turn a user or model supplied date into YYYY-MM-DD.

    Handles ISO dates, relative phrases (today, tomorrow, next week, the
    following week, next month, next <weekday>), numeric m/d/Y and month-name
    forms such as 'feb 20 2027' or '20 feb 2027'. A month-name date without
    a year rolls to next year once it has passed.

    Returns:
        The ISO date string, or None when the value cannot be parsed
    """
    today = today or date.today()
    text = (value or "").strip()
    if not text:
        return None

    if _ISO_DATE.match(text):
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError:
            return None

    lower = text.lower()
    if lower == "today":
        return today.isoformat()
    if lower == "tomorrow":
        return (today + timedelta(days=1)).isoformat()
    if lower in ("next week", "the following week"):
        return (today + timedelta(days=7)).isoformat()
    if lower == "next month":
        return _add_month(today).isoformat()

    match = _NEXT_WEEKDAY.match(lower)
    if match:
        days_ahead = (WEEKDAYS.index(match.group(1)) - today.weekday()) % 7 or 7
        return (today + timedelta(days=days_ahead)).isoformat()

    try:
        return datetime.strptime(text, "%m/%d/%Y").date().isoformat()
    except ValueError:
        pass

    month = day = year = None
    for part in re.split(r"[\s,/\-]+", lower):
        ordinal = _ORDINAL.match(part)
        if ordinal:
            part = ordinal.group(1)
        if part in MONTHS:
            month = MONTHS[part]
        elif part.isdigit():
            number = int(part)
            if number > 31:
                year = number
            elif day is None:
                day = number
            else:
                year = number

    if not (month and day):
        return None

    if year is None:
        year = today.year
        if (month, day) < (today.month, today.day):
            year += 1
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def process_extracted_info(new_info: dict, current: Optional[dict], today: Optional[date] = None) -> dict:
    """Merge newly extracted details into the current booking data"""
    today = today or date.today()
    merged = dict(current or {})

    for key, value in (new_info or {}).items():
        if value is None or value == "":
            continue

        if key == "date":
            value = normalize_date(str(value), today)
            if value is None:
                logger.info("Rejected unparseable date from model")
                continue
            if value < today.isoformat():
                logger.info("Rejected past date %s", value)
                continue

        if key == "preferences" and merged.get("preferences"):
            combined = list(merged["preferences"])
            for item in value:
                if item not in combined:
                    combined.append(item)
            merged["preferences"] = combined
        else:
            merged[key] = value

    return merged


def determine_booking_stage(data: dict) -> str:
    has_basics = bool(data.get("event_type")) and bool(data.get("date")) and bool(data.get("time"))

    if has_basics and (data.get("location") or data.get("venue_id")):
        if data.get("venue_id") or data.get("vendor_id"):
            return STAGE_CONFIRMATION
        return STAGE_VENDOR_SEARCH
    return STAGE_DISCOVERY


def parse_event_time(value) -> Optional[time]:
    """'2:00 PM' -> 14:00, '14:30' -> 14:30"""
    if isinstance(value, time):
        return value
    match = _TIME.match(str(value or ""))
    if not match:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    meridiem = (match.group(3) or "").lower()
    if meridiem == "p" and hour < 12:
        hour += 12
    elif meridiem == "a" and hour == 12:
        hour = 0
    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)


def parse_amount(text) -> float:
    """First number in a pricing string, 0 when there is none"""
    if isinstance(text, (int, float)):
        return float(text)
    match = _AMOUNT.search(str(text or ""))
    if not match:
        return 0.0
    return float(match.group(0).replace(",", ""))


def parse_guest_count(value) -> Optional[int]:
    """Positive head count from an int or a string like '120', None otherwise"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        count = int(value)
    else:
        text = str(value or "").replace(",", "").strip()
        if not text.isdigit():
            return None
        count = int(text)
    return count if count > 0 else None
