# Role: In-process BookingStore for local development, the CLI and tests. Same row shapes as the hosted tables.

from __future__ import annotations

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from booking_assistant.models.booking import PENDING_STATUS, BookingRecord
from booking_assistant.store.base import BookingStore, StoreError, check_status


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryStore(BookingStore):
    def __init__(self) -> None:
        self.bookings: Dict[str, Dict[str, Any]] = {}
        self.conversations: Dict[str, Dict[str, Any]] = {}

    def insert_booking(self, session_id: str, booking: BookingRecord) -> str:
        booking_id = str(uuid.uuid4())
        now = _now_iso()
        self.bookings[booking_id] = {
            "id": booking_id,
            "conversation_id": session_id,
            **booking.model_dump(),
            "extracted_data": booking.known_fields(),
            "status": PENDING_STATUS,
            "created_at": now,
            "updated_at": now,
        }
        # Key line: link the conversation row to its booking, as the hosted store does.
        if session_id in self.conversations:
            self.conversations[session_id]["booking_id"] = booking_id
        return booking_id

    def update_booking(self, booking_id: str, fields: Dict[str, Any]) -> None:
        check_status(fields)
        row = self.bookings.get(booking_id)
        if row is None:
            raise StoreError(f"Unknown booking id: {booking_id}")
        row.update(fields)
        row["updated_at"] = _now_iso()

    def upsert_conversation(self, snapshot: Dict[str, Any]) -> None:
        session_id = snapshot.get("session_id")
        if not session_id:
            raise StoreError("Conversation snapshot is missing session_id")

        now = _now_iso()
        row = self.conversations.get(session_id)
        if row is None:
            row = {"created_at": now}
            self.conversations[session_id] = row
        row.update(copy.deepcopy(snapshot))
        row["updated_at"] = now

    def fetch_conversation(self, session_id: str) -> Optional[Dict[str, Any]]:
        row = self.conversations.get(session_id)
        return copy.deepcopy(row) if row is not None else None

    def bookings_for(self, session_id: str) -> List[Dict[str, Any]]:
        return [b for b in self.bookings.values() if b["conversation_id"] == session_id]

    def ping(self) -> bool:
        return True
