"""Shared fixtures: fixed clock, in-memory store and a FlowController with no text generator."""

from datetime import date

import pytest

from booking_assistant.core.flow_controller import FlowController
from booking_assistant.core.reply_orchestrator import ReplyOrchestrator
from booking_assistant.store.memory_store import InMemoryStore

TODAY = date(2030, 1, 1)

COMPLETE_MESSAGE = (
    "I'm John Smith, john@x.com, 07464 111 222, airport transfer for 2 passengers "
    "from Heathrow to Mayfair, 25/12/2030 at 17:00"
)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def flow(store):
    return FlowController(
        store=store,
        reply_orchestrator=ReplyOrchestrator(contact_phone="0100 000 000", contact_email="ops@example.co.uk"),
        today=lambda: TODAY,
    )
