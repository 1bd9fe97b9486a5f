# Role: Per-session state container. Holds the current BookingRecord snapshot and the full message history,
# plus the at-most-once persistence flag and small bookkeeping fields (last_mode, turn_count).

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from booking_assistant.models.booking import BookingRecord, is_complete, missing_fields
from booking_assistant.models.message import Message
from booking_assistant.models.mode import Mode


class ConversationState(BaseModel):
    session_id: str
    booking: BookingRecord = Field(default_factory=BookingRecord)

    # Key line: append-only, never truncated here (callers may truncate for display).
    messages: List[Message] = Field(default_factory=list)

    # Key line: once True, the booking insert is never attempted again for this session.
    booking_persisted: bool = False
    booking_id: Optional[str] = None

    last_mode: Optional[Mode] = None
    turn_count: int = 0

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def missing_fields(self) -> List[str]:
        return missing_fields(self.booking)

    @property
    def is_complete(self) -> bool:
        return is_complete(self.booking)

    def snapshot(self, status: str) -> Dict[str, Any]:
        # Role: JSON-safe chat_conversations row (upserted by session_id). The booking itself is not stored here;
        # it is rebuilt from the user messages on recovery.
        return {
            "session_id": self.session_id,
            "messages": [m.model_dump(mode="json") for m in self.messages],
            "booking_id": self.booking_id,
            "status": status,
        }
