# Role: Deterministic replies used when the text generator is unavailable or fails. Pure functions of
# (booking, missing fields, mode, contact details), so they are testable without any network dependency.

from __future__ import annotations

from typing import List, Optional

import booking_assistant.config as config
from booking_assistant.models.booking import BookingRecord
from booking_assistant.models.mode import Mode
from booking_assistant.utils.clarification import build_clarification_question

TECHNICAL_DIFFICULTY_MESSAGE = (
    "Sorry, I'm having a technical difficulty right now. "
    "Please try again in a moment, or call us on {phone}."
)


def technical_difficulty_message(contact_phone: Optional[str] = None) -> str:
    return TECHNICAL_DIFFICULTY_MESSAGE.format(phone=contact_phone or config.CONTACT_PHONE)


def _summary(booking: BookingRecord) -> str:
    parts: List[str] = []
    if booking.service_type:
        parts.append(booking.service_type)
    if booking.pickup_location and booking.dropoff_location:
        parts.append(f"from {booking.pickup_location} to {booking.dropoff_location}")
    if booking.booking_date:
        when = booking.booking_date
        if booking.booking_time:
            when = f"{when} at {booking.booking_time[:5]}"
        parts.append(f"on {when}")
    if booking.passenger_count:
        noun = "passenger" if booking.passenger_count == 1 else "passengers"
        parts.append(f"for {booking.passenger_count} {noun}")
    return " ".join(parts)


def build_fallback_reply(
    booking: BookingRecord,
    missing: List[str],
    mode: Mode,
    contact_phone: Optional[str] = None,
    contact_email: Optional[str] = None,
) -> str:
    # 1) Mode framing first (cancellation / outside the service area)
    # 2) Complete booking -> "request received" + follow-up contact
    # 3) Incomplete -> one question for the next missing field
    phone = contact_phone or config.CONTACT_PHONE
    email = contact_email or config.CONTACT_EMAIL

    if mode == Mode.CANCELLED:
        return (
            "No problem, I've noted that you'd like to cancel. "
            f"If you change your mind, just message us here or call {phone}."
        )

    if mode == Mode.OUT_OF_REGION:
        return (
            "I'm sorry, we currently only operate within the UK. "
            f"For anything further afield, please call {phone} or email {email} and our team will advise."
        )

    if not missing:
        summary = _summary(booking)
        received = f"Thank you, we've received your booking request ({summary})." if summary else (
            "Thank you, we've received your booking request."
        )
        return (
            f"{received} Our team will confirm the details with you shortly. "
            f"If you need anything in the meantime, call {phone} or email {email}."
        )

    question = build_clarification_question(missing)
    if mode == Mode.UPDATE:
        return f"Of course, I've updated what I could. {question}"
    return question
