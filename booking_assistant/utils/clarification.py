# Role: Deterministic "one question" builder. Converts missing-field keys (from the booking record) into a
# single user-facing question to keep the dialog step-by-step.

from __future__ import annotations

from typing import List

import booking_assistant.config as config

_QUESTIONS = {
    "customer_name": "May I take your full name, please?",
    "customer_email": "What email address should we send the booking details to?",
    "customer_phone": "What's the best phone number to reach you on?",
    "service_type": (
        "Which service do you need: airport transfer, wedding, corporate, prom, event, "
        "chauffeur service, or security?"
    ),
    "pickup_location": "Where should we pick you up, and where are you heading? (e.g., from Heathrow to Mayfair)",
    "dropoff_location": "Where would you like to be dropped off?",
    "booking_date": "What date do you need the car? (e.g., 25/12/2025 or tomorrow)",
    "booking_time": "What time should we collect you? (e.g., 5pm or 17:00)",
    "passenger_count": "How many passengers will be travelling?",
}


def build_clarification_question(missing_info: List[str]) -> str:
    # Step 1: log missing_info in debug mode (helps trace dialog state).
    if config.DEBUG:
        print("CLARIFICATION_BUILDER missing_info:", missing_info)

    if not missing_info:
        return "Is there anything else you'd like to add to your booking?"

    # Step 2: map internal slot keys -> a single friendly question.
    return _QUESTIONS.get(
        missing_info[0],
        "Could you share a few more details about your journey (date, time, pickup and drop-off)?",
    )
