# Role: Builds the per-turn LLM prompt for reply generation. Injects the extracted booking details, the
# missing fields and the turn mode, plus a strict policy per mode (cancelled / out-of-region / update / confirm).

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from booking_assistant.models.mode import Mode

_FIELD_LABELS = {
    "customer_name": "full name",
    "customer_email": "email address",
    "customer_phone": "phone number",
    "service_type": "type of service",
    "pickup_location": "pickup location",
    "dropoff_location": "drop-off location",
    "booking_date": "date",
    "booking_time": "pickup time",
    "passenger_count": "number of passengers",
}

_MODE_POLICIES = {
    Mode.CANCELLED: """
CANCELLATION POLICY (MUST FOLLOW):
- The customer wants to cancel or stop. Acknowledge it politely in one or two sentences.
- Do NOT ask for any further booking details.
- Mention they can message again or call {phone} if they change their mind.
""",
    Mode.OUT_OF_REGION: """
OUT-OF-REGION POLICY (MUST FOLLOW):
- The customer mentioned a location outside the UK. Explain we only operate within the UK.
- Offer to help with any UK leg of the journey (e.g., to or from a UK airport).
- Give the contact details for special requests: {phone} / {email}.
""",
    Mode.UPDATE: """
UPDATE POLICY (MUST FOLLOW):
- The customer is correcting or changing a detail. Confirm the updated details you can see in the context.
- If the new value is not in the context yet, ask them for the new value explicitly (e.g., "What's the new pickup time?").
""",
    Mode.CONFIRM: """
CONFIRMATION POLICY (MUST FOLLOW):
- All required details are already collected. Briefly recap the booking and confirm the request is received.
- Tell them our team will confirm by phone or email, and give {phone} / {email} for anything urgent.
""",
    Mode.NORMAL: """
COLLECTION POLICY (MUST FOLLOW):
- If details are missing, acknowledge what you have and ask for the NEXT missing details (in the order listed).
- If nothing is missing, confirm the booking request is received and that the team will be in touch.
""",
}


def build_reply_prompt(
    *,
    user_message: str,
    extracted_data: Dict[str, Any],
    missing_fields: List[str],
    mode: Mode,
    contact_phone: str,
    contact_email: str,
    recent_messages: Optional[List[Dict[str, str]]] = None,
) -> str:
    # Step 1: JSON-safe context (the booking details are the source of truth).
    known = {k: v for k, v in extracted_data.items() if v not in (None, "")}
    missing_labels = [_FIELD_LABELS.get(f, f) for f in missing_fields]

    history_block = ""
    if recent_messages:
        formatted = "\n".join([f'{m["role"]}: {m["content"]}' for m in recent_messages])
        history_block = f"\n\nRecent conversation:\n{formatted}"

    # Step 2: pick the policy for this turn's mode.
    policy = _MODE_POLICIES.get(mode, _MODE_POLICIES[Mode.NORMAL]).format(
        phone=contact_phone, email=contact_email
    ).strip()

    return f"""
Turn mode: {mode.value}

Latest customer message:
{user_message}

Booking details collected so far (source of truth):
{json.dumps(known, ensure_ascii=False)}

Still missing (ask in this order): {", ".join(missing_labels) if missing_labels else "nothing, the booking is complete"}

{policy}

STRICT OUTPUT RULES:
- Output ONLY the message to the customer.
- Do NOT include preambles like "Okay…", "I will…", "The user wants…".
- Do NOT output JSON, field names, or internal notes.
- Never say "null", "none" or "not set" for details you don't have; just ask for them.
{history_block}
""".strip()
