# Role: External store adapter for the hosted Supabase database. Talks to the PostgREST endpoints of the
# ai_bookings and chat_conversations tables and normalizes every failure into StoreError.

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

import booking_assistant.config as config
from booking_assistant.models.booking import PENDING_STATUS, BookingRecord
from booking_assistant.store.base import BookingStore, StoreError, check_status

log = logging.getLogger(__name__)


class SupabaseStore(BookingStore):
    BOOKINGS_TABLE = "ai_bookings"
    CONVERSATIONS_TABLE = "chat_conversations"
    _TIMEOUT_SECONDS = 15

    def __init__(self, url: Optional[str] = None, api_key: Optional[str] = None) -> None:
        url = url or os.getenv("SUPABASE_URL")
        self.api_key = api_key or os.getenv("SUPABASE_KEY")
        if not url or not self.api_key:
            raise RuntimeError("Missing SUPABASE_URL / SUPABASE_KEY in environment or .env")

        self.rest_url = f"{url.rstrip('/')}/rest/v1"

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        # 1) Single HTTP call against /rest/v1/<table>
        # 2) Raise StoreError for transport errors and non-2xx responses
        # 3) Return decoded JSON (None for empty bodies, e.g. return=minimal)
        try:
            r = requests.request(
                method,
                f"{self.rest_url}/{table}",
                params=params,
                json=json,
                headers=self._headers(prefer),
                timeout=self._TIMEOUT_SECONDS,
            )
            r.raise_for_status()
        except requests.RequestException as e:
            raise StoreError(f"Supabase {method} {table} failed: {e}") from e

        if config.DEBUG:
            print(f"--- SUPABASE {method} {table} -> {r.status_code} ---")

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise StoreError(f"Bad Supabase payload from {table}: {e}") from e

    def insert_booking(self, session_id: str, booking: BookingRecord) -> str:
        now = datetime.now(timezone.utc).isoformat()
        row = {
            "conversation_id": session_id,
            **booking.model_dump(),
            "extracted_data": booking.known_fields(),
            "status": PENDING_STATUS,
            "created_at": now,
            "updated_at": now,
        }
        payload = self._request("POST", self.BOOKINGS_TABLE, json=[row], prefer="return=representation")

        if not isinstance(payload, list) or not payload or not payload[0].get("id"):
            raise StoreError(f"Supabase insert into {self.BOOKINGS_TABLE} returned no id")
        booking_id = str(payload[0]["id"])

        # Key line: the booking is already durable; a failed back-link only means the mirror lags.
        try:
            self._request(
                "PATCH",
                self.CONVERSATIONS_TABLE,
                params={"session_id": f"eq.{session_id}"},
                json={"booking_id": booking_id, "updated_at": now},
                prefer="return=minimal",
            )
        except StoreError as e:
            log.warning("Booking %s saved but conversation link failed: %s", booking_id, e)

        return booking_id

    def update_booking(self, booking_id: str, fields: Dict[str, Any]) -> None:
        check_status(fields)
        body = dict(fields)
        body["updated_at"] = datetime.now(timezone.utc).isoformat()
        self._request(
            "PATCH",
            self.BOOKINGS_TABLE,
            params={"id": f"eq.{booking_id}"},
            json=body,
            prefer="return=minimal",
        )

    def upsert_conversation(self, snapshot: Dict[str, Any]) -> None:
        body = dict(snapshot)
        body["updated_at"] = datetime.now(timezone.utc).isoformat()
        self._request(
            "POST",
            self.CONVERSATIONS_TABLE,
            params={"on_conflict": "session_id"},
            json=[body],
            prefer="resolution=merge-duplicates,return=minimal",
        )

    def fetch_conversation(self, session_id: str) -> Optional[Dict[str, Any]]:
        payload = self._request(
            "GET",
            self.CONVERSATIONS_TABLE,
            params={"session_id": f"eq.{session_id}", "select": "*", "limit": "1"},
        )
        if isinstance(payload, list) and payload:
            return payload[0]
        return None

    def ping(self) -> bool:
        try:
            self._request("GET", self.BOOKINGS_TABLE, params={"select": "id", "limit": "1"})
        except StoreError as e:
            log.warning("Supabase connection check failed: %s", e)
            return False
        return True
