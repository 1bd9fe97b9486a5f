# Role: In-memory session registry. Owns lifecycle of ConversationState objects:
# create/get by session_id, rebuild from a stored conversation row, append messages, drop sessions.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from booking_assistant.core.slot_extractor import extract_slots
from booking_assistant.models.booking import BookingRecord, merge
from booking_assistant.models.message import Message, Role
from booking_assistant.models.mode import Mode
from booking_assistant.models.state import ConversationState


class StateManager:
    def __init__(self) -> None:
        self._states: Dict[str, ConversationState] = {}

    def get(self, session_id: str) -> Optional[ConversationState]:
        return self._states.get(session_id)

    def get_or_create(self, session_id: str) -> ConversationState:
        # Reuse existing state or initialize a fresh one.
        state = self._states.get(session_id)
        if state is None:
            state = ConversationState(session_id=session_id)
            self._states[session_id] = state
        return state

    def restore(self, row: Dict[str, Any]) -> ConversationState:
        # Role: rebuild a session from its mirrored conversation row (session recovery after a restart).
        # 1) Messages come back as stored
        # 2) The booking is replayed from the user messages, each against the day it was sent
        #    ("tomorrow" keeps meaning the day after the original message)
        # 3) A stored booking_id means the booking was already persisted (never insert again)
        # 4) Unknown status strings (e.g. "initiated") leave last_mode unset
        session_id = row["session_id"]
        messages = [Message(**m) for m in (row.get("messages") or [])]

        booking = BookingRecord()
        for m in messages:
            if m.role == "user":
                booking = merge(booking, extract_slots(m.content, today=m.timestamp.date()))

        try:
            last_mode: Optional[Mode] = Mode(row.get("status"))
        except ValueError:
            last_mode = None

        booking_id = row.get("booking_id")
        state = ConversationState(
            session_id=session_id,
            booking=booking,
            messages=messages,
            booking_id=str(booking_id) if booking_id else None,
            booking_persisted=bool(booking_id),
            last_mode=last_mode,
            turn_count=sum(1 for m in messages if m.role == "user"),
        )
        self._states[session_id] = state
        return state

    def add_message(self, state: ConversationState, role: Role, content: str) -> ConversationState:
        # Key line: history is append-only; no trimming here.
        state.messages.append(Message(role=role, content=content))
        state.updated_at = datetime.now(timezone.utc)
        return state

    def increment_turn(self, state: ConversationState) -> None:
        state.turn_count += 1
        state.updated_at = datetime.now(timezone.utc)

    def drop(self, session_id: str) -> bool:
        return self._states.pop(session_id, None) is not None
