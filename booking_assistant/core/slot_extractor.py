# Role: Deterministic slot extraction for booking details. Turns one free-text chat message into a partial
# BookingRecord update without calling the LLM (reliable + testable).
#
# Rules live in SLOT_RULES and run in list order. A rule is skipped when an earlier rule already produced one
# of its fields in the same message, which is how "first match wins" is expressed (dates, times, service type).

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from booking_assistant.models.booking import (
    AIRPORT_TRANSFER,
    CHAUFFEUR_SERVICE,
    CORPORATE_TRANSPORT,
    EVENT_TRANSPORT,
    PROM_PARTIES,
    SECURITY_SERVICES,
    WEDDING_TRANSPORT,
)

Updates = Dict[str, Any]
Builder = Callable[["re.Match[str]", date], Optional[Updates]]


@dataclass(frozen=True)
class SlotRule:
    name: str
    fields: Tuple[str, ...]
    pattern: "re.Pattern[str]"
    build: Builder


# Iteration order is the tie-break when several keywords appear in one message.
SERVICE_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("airport", AIRPORT_TRANSFER),
    ("wedding", WEDDING_TRANSPORT),
    ("corporate", CORPORATE_TRANSPORT),
    ("prom", PROM_PARTIES),
    ("event", EVENT_TRANSPORT),
    ("security", SECURITY_SERVICES),
    ("chauffeur", CHAUFFEUR_SERVICE),
)

_VEHICLES = (
    r"mercedes(?:[- ]benz)?(?:\s+[sve]-class)?",
    r"[sve]-class",
    r"range\s+rover",
    r"rolls[- ]royce",
    r"bentley",
    r"limo(?:usine)?",
    r"executive\s+car",
    r"people\s+carrier",
    r"mpv",
    r"minibus",
)

_EMAIL = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_PHONE = re.compile(r"\+?\d[\d\s-]{8,}")
_PASSENGERS = re.compile(r"(\d+)\s*(?:passengers?|pax|people|persons?)\b", re.IGNORECASE)
_ROUTE = re.compile(r"\bfrom\s+([^,.\n]+?)\s+to\s+([^,.\n]+?)\s*(?:[,.\n]|$)", re.IGNORECASE)
_TODAY = re.compile(r"\btoday\b", re.IGNORECASE)
_TOMORROW = re.compile(r"\btomorrow\b", re.IGNORECASE)
_DMY = re.compile(r"(?<!\d)(\d{1,2})[/.-](\d{1,2})[/.-](\d{4}|\d{2})(?!\d)")
_YMD = re.compile(r"(?<!\d)(\d{4})[/.-](\d{1,2})[/.-](\d{1,2})(?!\d)")
_MERIDIEM_TIME = re.compile(r"(?<![\d:])(\d{1,2})(?::(\d{2}))?\s*(am|pm)\b", re.IGNORECASE)
_BARE_TIME = re.compile(r"\b(\d{1,2}):(\d{2})\b")
_NAME = re.compile(r"\b(?:i['’]m|i am|my name is|call me)\s+([A-Za-z][A-Za-z ]{0,29})", re.IGNORECASE)
_VEHICLE = re.compile(r"\b(" + "|".join(_VEHICLES) + r")\b", re.IGNORECASE)
_REQUIREMENTS = re.compile(r"\b(?:special\s+requirements?|requirements?|notes?)\s*:\s*([^\n]+)", re.IGNORECASE)

_MIN_PHONE_DIGITS = 9

# First words that follow "I'm" / "call me" without introducing a name ("call me on 07700...", "I'm looking for...").
_NOT_NAMES = frozenset({
    "a", "an", "at", "after", "back", "before", "from", "going", "here", "in", "interested", "just", "later",
    "looking", "not", "now", "on", "please", "still", "the", "today", "tomorrow", "travelling", "trying", "when",
})


def _email(m: "re.Match[str]", today: date) -> Optional[Updates]:
    return {"customer_email": m.group(0)}


def _phone(m: "re.Match[str]", today: date) -> Optional[Updates]:
    raw = m.group(0)
    # Key line: an ISO date ("2023-12-25") fits the character class but has too few digits for a phone.
    if sum(ch.isdigit() for ch in raw) < _MIN_PHONE_DIGITS:
        return None
    return {"customer_phone": re.sub(r"\s+", " ", raw).strip()}


def _passengers(m: "re.Match[str]", today: date) -> Optional[Updates]:
    count = int(m.group(1), 10)
    return {"passenger_count": count} if count > 0 else None


def _service(label: str) -> Builder:
    def build(m: "re.Match[str]", today: date) -> Optional[Updates]:
        return {"service_type": label}

    return build


def _route(m: "re.Match[str]", today: date) -> Optional[Updates]:
    pickup = m.group(1).strip()
    dropoff = m.group(2).strip()
    if not pickup or not dropoff:
        return None
    return {"pickup_location": pickup, "dropoff_location": dropoff}


def _relative_day(offset_days: int) -> Builder:
    def build(m: "re.Match[str]", today: date) -> Optional[Updates]:
        return {"booking_date": (today + timedelta(days=offset_days)).isoformat()}

    return build


def _iso_date(year: int, month: int, day: int) -> Optional[Updates]:
    try:
        return {"booking_date": date(year, month, day).isoformat()}
    except ValueError:
        return None


def _day_month_year(m: "re.Match[str]", today: date) -> Optional[Updates]:
    # UK convention: day first. Two-digit years are taken as 20YY.
    day, month, year = m.group(1), m.group(2), m.group(3)
    if len(year) == 2:
        year = f"20{year}"
    return _iso_date(int(year), int(month), int(day))


def _year_month_day(m: "re.Match[str]", today: date) -> Optional[Updates]:
    return _iso_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def _meridiem_time(m: "re.Match[str]", today: date) -> Optional[Updates]:
    hour = int(m.group(1))
    minute = int(m.group(2)) if m.group(2) else 0
    if not 1 <= hour <= 12 or minute > 59:
        return None

    meridiem = m.group(3).lower()
    if meridiem == "pm" and hour != 12:
        hour += 12
    if meridiem == "am" and hour == 12:
        hour = 0
    return {"booking_time": f"{hour:02d}:{minute:02d}:00"}


def _bare_time(m: "re.Match[str]", today: date) -> Optional[Updates]:
    hour = int(m.group(1))
    minute = int(m.group(2))
    if hour > 23 or minute > 59:
        return None
    return {"booking_time": f"{hour:02d}:{minute:02d}:00"}


def _name(m: "re.Match[str]", today: date) -> Optional[Updates]:
    name = m.group(1).strip()
    if not name or name.split()[0].lower() in _NOT_NAMES:
        return None
    return {"customer_name": name}


def _vehicle(m: "re.Match[str]", today: date) -> Optional[Updates]:
    return {"vehicle_preference": re.sub(r"\s+", " ", m.group(1)).strip()}


def _requirements(m: "re.Match[str]", today: date) -> Optional[Updates]:
    text = m.group(1).strip()
    return {"special_requirements": text} if text else None


SLOT_RULES: List[SlotRule] = [
    SlotRule("email", ("customer_email",), _EMAIL, _email),
    SlotRule("phone", ("customer_phone",), _PHONE, _phone),
    SlotRule("passengers", ("passenger_count",), _PASSENGERS, _passengers),
    *(
        SlotRule(
            f"service:{keyword}",
            ("service_type",),
            re.compile(rf"\b{keyword}s?\b", re.IGNORECASE),
            _service(label),
        )
        for keyword, label in SERVICE_KEYWORDS
    ),
    SlotRule("route", ("pickup_location", "dropoff_location"), _ROUTE, _route),
    SlotRule("date:today", ("booking_date",), _TODAY, _relative_day(0)),
    SlotRule("date:tomorrow", ("booking_date",), _TOMORROW, _relative_day(1)),
    SlotRule("date:dmy", ("booking_date",), _DMY, _day_month_year),
    SlotRule("date:ymd", ("booking_date",), _YMD, _year_month_day),
    SlotRule("time:meridiem", ("booking_time",), _MERIDIEM_TIME, _meridiem_time),
    SlotRule("time:24h", ("booking_time",), _BARE_TIME, _bare_time),
    SlotRule("name", ("customer_name",), _NAME, _name),
    SlotRule("vehicle", ("vehicle_preference",), _VEHICLE, _vehicle),
    SlotRule("requirements", ("special_requirements",), _REQUIREMENTS, _requirements),
]


def extract_slots(message: str, today: Optional[date] = None) -> Updates:
    # 1) Run every rule against the raw message (independent of the current record)
    # 2) Skip rules whose fields were already produced by an earlier rule this message
    # 3) Within a rule, the first candidate its builder accepts wins ("25-12-2030 ... 07700 900 123")
    # 4) Return only what matched; no-match is simply an absent key
    if not message:
        return {}

    today = today or date.today()
    out: Updates = {}

    for rule in SLOT_RULES:
        if any(field in out for field in rule.fields):
            continue

        for match in rule.pattern.finditer(message):
            updates = rule.build(match, today)
            if updates:
                out.update(updates)
                break

    return out
