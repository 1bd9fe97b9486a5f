# Role: Canonical booking record (contact, route, schedule, party, preferences). Snapshots are immutable:
# merge() returns a new record with the extracted fields applied, so a turn can be replayed without a live session.

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

AIRPORT_TRANSFER = "Airport Transfer"
WEDDING_TRANSPORT = "Wedding Transport"
CORPORATE_TRANSPORT = "Corporate Transport"
PROM_PARTIES = "Prom Parties"
EVENT_TRANSPORT = "Event Transport"
SECURITY_SERVICES = "Security Services"
CHAUFFEUR_SERVICE = "Chauffeur Service"
OTHER_SERVICE = "Other"

SERVICE_TYPES: Tuple[str, ...] = (
    AIRPORT_TRANSFER,
    WEDDING_TRANSPORT,
    CORPORATE_TRANSPORT,
    PROM_PARTIES,
    EVENT_TRANSPORT,
    SECURITY_SERVICES,
    CHAUFFEUR_SERVICE,
    OTHER_SERVICE,
)

# Key line: order matters, it is the order the assistant asks for missing details.
REQUIRED_FIELDS: Tuple[str, ...] = (
    "customer_name",
    "customer_email",
    "customer_phone",
    "service_type",
    "pickup_location",
    "dropoff_location",
    "booking_date",
    "booking_time",
    "passenger_count",
)

PENDING_STATUS = "pending"
CANCELLED_STATUS = "cancelled"

BOOKING_STATUSES: Tuple[str, ...] = (PENDING_STATUS, "accepted", "rejected", "completed", CANCELLED_STATUS)


class BookingRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None

    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None

    booking_date: Optional[str] = None  # YYYY-MM-DD
    booking_time: Optional[str] = None  # HH:MM:SS

    service_type: Optional[str] = None
    passenger_count: Optional[int] = None

    vehicle_preference: Optional[str] = None
    special_requirements: Optional[str] = None

    def known_fields(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


def merge(old: BookingRecord, partial: Mapping[str, Any]) -> BookingRecord:
    # 1) Ignore empty updates
    # 2) Drop unknown keys, None and blank strings (no-match never clears a field)
    # 3) Service labels outside SERVICE_TYPES are filed as "Other"
    # 4) Per-key overwrite (last write wins per field)
    if not partial:
        return old

    updates: Dict[str, Any] = {}
    for key, value in partial.items():
        if key not in BookingRecord.model_fields or value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        if key == "service_type" and value not in SERVICE_TYPES:
            value = OTHER_SERVICE
        if key == "passenger_count":
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                continue
        updates[key] = value

    if not updates:
        return old

    # Key line: validate through the constructor instead of model_copy(update=...), which skips validation.
    return BookingRecord(**{**old.model_dump(), **updates})


def changed_fields(old: BookingRecord, new: BookingRecord) -> Dict[str, Any]:
    # Role: fields whose value differs between two snapshots (used to push corrections to a stored booking).
    before = old.model_dump()
    after = new.model_dump()
    return {key: value for key, value in after.items() if before.get(key) != value}


def missing_fields(record: BookingRecord) -> List[str]:
    return [name for name in REQUIRED_FIELDS if getattr(record, name) in (None, "")]


def is_complete(record: BookingRecord) -> bool:
    return not missing_fields(record)
