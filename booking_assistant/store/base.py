"""Abstract persistence store for bookings and conversation snapshots.

The flow controller only talks to this interface, so the hosted database
(Supabase) and the in-memory development store are interchangeable.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from booking_assistant.models.booking import BOOKING_STATUSES, BookingRecord


class StoreError(RuntimeError):
    """Raised by store implementations for any failed read or write."""


class BookingStore(ABC):
    """Persistence backend for AI bookings and chat conversations."""

    @abstractmethod
    def insert_booking(self, session_id: str, booking: BookingRecord) -> str:
        """Insert one booking row and return its generated id.

        The row carries every BookingRecord field, a ``conversation_id``
        reference to the session, an ``extracted_data`` copy of the record
        and ``status="pending"``.
        """

    @abstractmethod
    def update_booking(self, booking_id: str, fields: Dict[str, Any]) -> None:
        """Apply a partial update (corrected fields or a status) to a stored booking."""

    @abstractmethod
    def upsert_conversation(self, snapshot: Dict[str, Any]) -> None:
        """Create or replace the conversation row keyed by ``snapshot["session_id"]``."""

    @abstractmethod
    def fetch_conversation(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored conversation row, or None if the session is unknown."""

    @abstractmethod
    def ping(self) -> bool:
        """Return True if the backend is reachable."""


def check_status(fields: Dict[str, Any]) -> None:
    """Reject a status the ai_bookings table would not accept."""
    status = fields.get("status")
    if status is not None and status not in BOOKING_STATUSES:
        raise StoreError(f"Unknown booking status: {status!r}")
