# Role: Stateless reply layer. Hands (message, booking, missing fields, mode) to the injected text generator and
# relays its answer; on any generator failure (or no generator configured) returns the deterministic fallback.

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from booking_assistant.core.fallback_handler import build_fallback_reply
from booking_assistant.models.booking import BookingRecord
from booking_assistant.models.mode import Mode

log = logging.getLogger(__name__)


class ReplyGenerator(ABC):
    """Natural-language reply backend consumed by ReplyOrchestrator.

    Subclasses receive ``recent_messages`` whenever there is history to share. Any other object with a
    ``generate_reply`` method is called with the four positional arguments only.
    """

    @abstractmethod
    def generate_reply(
        self,
        user_message: str,
        extracted_data: Dict[str, Any],
        missing_fields: List[str],
        mode: Mode,
        recent_messages: Optional[List[Dict[str, str]]] = None,
    ) -> str:
        """Return the reply text; raise on failure (network, quota, empty output)."""


class ReplyOrchestrator:
    """
    Wraps an optional generator (see ReplyGenerator). The generator may raise; the user never sees that,
    only fallback text.
    """

    def __init__(
        self,
        generator: Optional[Any] = None,
        contact_phone: Optional[str] = None,
        contact_email: Optional[str] = None,
    ) -> None:
        self.generator = generator
        self.contact_phone = contact_phone
        self.contact_email = contact_email

    def fallback(self, booking: BookingRecord, missing: List[str], mode: Mode) -> str:
        return build_fallback_reply(
            booking,
            missing,
            mode,
            contact_phone=self.contact_phone,
            contact_email=self.contact_email,
        )

    def reply(
        self,
        user_message: str,
        booking: BookingRecord,
        missing: List[str],
        mode: Mode,
        recent_messages: Optional[List[Dict[str, str]]] = None,
    ) -> str:
        # 1) No generator -> deterministic text
        # 2) Generator -> relay non-empty text
        # 3) Any error / empty text -> log for operators + deterministic text
        if self.generator is None:
            return self.fallback(booking, missing, mode)

        try:
            kwargs = {}
            if recent_messages and isinstance(self.generator, ReplyGenerator):
                kwargs["recent_messages"] = recent_messages
            text = self.generator.generate_reply(
                user_message,
                booking.known_fields(),
                list(missing),
                mode,
                **kwargs,
            )
        except Exception as e:
            log.warning("Reply generation failed (mode=%s), using fallback: %s", mode.value, e)
            return self.fallback(booking, missing, mode)

        if not text or not text.strip():
            log.warning("Reply generator returned empty text (mode=%s), using fallback", mode.value)
            return self.fallback(booking, missing, mode)

        return text.strip()
