# Role: Composition root for the HTTP layer. Builds one FlowController from the environment:
# Supabase store when credentials exist (else in-memory), Gemini reply generator when a key exists (else
# deterministic fallback replies only).

from __future__ import annotations

import logging
import os
from typing import Optional

import booking_assistant.config as config
from booking_assistant.core.flow_controller import FlowController
from booking_assistant.core.reply_orchestrator import ReplyOrchestrator
from booking_assistant.llm.response_generator import GeminiReplyGenerator
from booking_assistant.store.base import BookingStore
from booking_assistant.store.memory_store import InMemoryStore
from booking_assistant.store.supabase_store import SupabaseStore

log = logging.getLogger(__name__)


def build_store() -> BookingStore:
    if os.getenv("SUPABASE_URL") and os.getenv("SUPABASE_KEY"):
        log.info("Using Supabase store")
        return SupabaseStore()
    log.warning("SUPABASE_URL / SUPABASE_KEY not set, bookings are kept in memory only")
    return InMemoryStore()


def build_generator() -> Optional[GeminiReplyGenerator]:
    try:
        return GeminiReplyGenerator()
    except RuntimeError as e:
        log.warning("Reply generator disabled, using deterministic replies: %s", e)
        return None


def build_flow_controller() -> FlowController:
    orchestrator = ReplyOrchestrator(
        generator=build_generator(),
        contact_phone=config.CONTACT_PHONE,
        contact_email=config.CONTACT_EMAIL,
    )
    return FlowController(store=build_store(), reply_orchestrator=orchestrator)


flow_controller = build_flow_controller()
