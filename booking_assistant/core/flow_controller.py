# Role: Orchestrator for one booking conversation turn. It glues together:
# session state, intent classification, slot extraction, reply orchestration, at-most-once booking persistence,
# and the per-turn conversation mirror to the store.

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional

import booking_assistant.config as config
from booking_assistant.core.intent_classifier import classify_mode
from booking_assistant.core.reply_orchestrator import ReplyOrchestrator
from booking_assistant.core.slot_extractor import extract_slots
from booking_assistant.core.state_manager import StateManager
from booking_assistant.models.booking import CANCELLED_STATUS, BookingRecord, changed_fields, merge
from booking_assistant.models.mode import INITIATED_STATUS, Mode
from booking_assistant.models.state import ConversationState
from booking_assistant.store.base import BookingStore, StoreError
from booking_assistant.store.memory_store import InMemoryStore

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnResponse:
    session_id: str
    response: str
    booking_ready: bool


class FlowController:
    def __init__(
        self,
        store: Optional[BookingStore] = None,
        reply_orchestrator: Optional[ReplyOrchestrator] = None,
        state_manager: Optional[StateManager] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        # Key line: dependencies are injectable for testing/mocking (fake store, fake generator, fixed clock).
        self.store = store if store is not None else InMemoryStore()
        self.reply_orchestrator = reply_orchestrator or ReplyOrchestrator()
        self.state_manager = state_manager or StateManager()
        self._today = today or date.today

    # ── Session lifecycle ─────────────────────────────────────

    def start_session(self, session_id: Optional[str] = None) -> ConversationState:
        state = self.state_manager.get_or_create(session_id or str(uuid.uuid4()))
        self._mirror(state, INITIATED_STATUS)
        log.info("Session started: %s", state.session_id)
        return state

    def get_state(self, session_id: str) -> Optional[ConversationState]:
        return self.state_manager.get(session_id) or self._recover(session_id)

    def reset_session(self, session_id: str) -> ConversationState:
        # Role: abandon the current exchange and start over under a fresh id (stored rows stay untouched).
        self.state_manager.drop(session_id)
        log.info("Session reset: %s", session_id)
        return self.start_session()

    def _recover(self, session_id: str) -> Optional[ConversationState]:
        try:
            row = self.store.fetch_conversation(session_id)
        except StoreError as e:
            log.error("Could not recover session %s from store: %s", session_id, e)
            return None
        if not row:
            return None
        log.info("Session %s recovered from store", session_id)
        return self.state_manager.restore(row)

    def _load(self, session_id: str) -> ConversationState:
        return self.get_state(session_id) or self.state_manager.get_or_create(session_id)

    def _recent_messages(self, state: ConversationState, limit: int = 8) -> List[Dict[str, str]]:
        # Role: compact history format for prompts (excludes the turn being answered).
        msgs = state.messages[:-1][-limit:]
        return [{"role": m.role, "content": m.content} for m in msgs]

    # ── Turn handling ─────────────────────────────────────────

    def process_message(self, session_id: str, user_message: str) -> TurnResponse:
        # 1) Load state, append user turn
        # 2) Classify mode against PRE-turn completion
        # 3) Extract slots -> merge into a new BookingRecord snapshot
        # 4) Recompute missing fields
        # 5) Reply (generator or deterministic fallback)
        # 6) Append assistant turn
        # 7) At-most-once booking insert (or push corrections/cancellation to an existing booking)
        # 8) Mirror conversation snapshot to the store
        state = self._load(session_id)
        self.state_manager.add_message(state, "user", user_message)

        mode = classify_mode(user_message, was_complete=state.is_complete)

        before = state.booking
        extracted = extract_slots(user_message, today=self._today())
        state.booking = merge(before, extracted)
        state.last_mode = mode
        self.state_manager.increment_turn(state)

        missing = state.missing_fields

        if config.DEBUG:
            print("\n--- FLOW DEBUG ---")
            print("SESSION:", session_id)
            print("USER MESSAGE:", user_message)
            print("MODE:", mode)
            print("EXTRACTED:", extracted)
            print("BOOKING:", state.booking.known_fields())
            print("MISSING:", missing)
            print("PERSISTED:", state.booking_persisted, state.booking_id)
            print("------------------\n")

        reply = self.reply_orchestrator.reply(
            user_message,
            state.booking,
            missing,
            mode,
            recent_messages=self._recent_messages(state),
        )
        self.state_manager.add_message(state, "assistant", reply)

        booking_ready = False
        if state.booking_persisted:
            self._sync_persisted_booking(state, before, mode)
        elif not missing and self._should_insert(mode):
            booking_ready = self._persist_booking(state)

        self._mirror(state, mode.value)
        return TurnResponse(session_id=session_id, response=reply, booking_ready=booking_ready)

    def _should_insert(self, mode: Mode) -> bool:
        # Key line: the cancelling turn itself never creates a booking. Any other turn with a complete,
        # not-yet-persisted record inserts (this is also the retry after a failed insert).
        return mode != Mode.CANCELLED

    def _persist_booking(self, state: ConversationState) -> bool:
        try:
            booking_id = self.store.insert_booking(state.session_id, state.booking)
        except StoreError as e:
            # No retry here: the flag stays False, so the next complete turn tries again.
            log.error("Booking insert failed for session %s: %s", state.session_id, e)
            return False

        state.booking_persisted = True
        state.booking_id = booking_id
        log.info(
            "Booking %s persisted for session %s (%s, email=%s)",
            booking_id,
            state.session_id,
            state.booking.service_type,
            config.redact_pii(state.booking.customer_email),
        )
        return True

    def _sync_persisted_booking(self, state: ConversationState, before: BookingRecord, mode: Mode) -> None:
        # Role: keep the single stored booking in step with later turns (never a second insert).
        if state.booking_id is None:
            return

        if mode == Mode.CANCELLED:
            fields = {"status": CANCELLED_STATUS}
        else:
            changes = changed_fields(before, state.booking)
            if not changes:
                return
            fields = {**changes, "extracted_data": state.booking.known_fields()}

        try:
            self.store.update_booking(state.booking_id, fields)
        except StoreError as e:
            log.error("Booking %s update failed for session %s: %s", state.booking_id, state.session_id, e)
            return
        log.info("Booking %s updated (%s)", state.booking_id, ", ".join(sorted(fields)))

    def _mirror(self, state: ConversationState, status: str) -> None:
        try:
            self.store.upsert_conversation(state.snapshot(status))
        except StoreError as e:
            # Key line: a lagging mirror is acceptable; the conversation itself continues.
            log.error("Conversation mirror failed for session %s: %s", state.session_id, e)
