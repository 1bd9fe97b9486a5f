# Role: Central configuration module. Loads .env into environment variables and computes runtime flags
# (DEBUG, public contact details). Importers read booking_assistant.config.<NAME> instead of threading values
# through every call.

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

DEBUG: bool = False

# Public follow-up details quoted in deterministic replies.
CONTACT_PHONE: str = "07464 247 007"
CONTACT_EMAIL: str = "info@elitetransport.co.uk"

_LOG_FORMAT = "%(asctime)s %(name)-36s %(levelname)-7s %(message)s"


def load_env() -> None:
    """
    Load .env into os.environ, then recompute DEBUG and the contact details.
    This makes the globals correct even if load_env() is called after import.
    """
    global DEBUG, CONTACT_PHONE, CONTACT_EMAIL
    load_dotenv()
    # Key line: accept common truthy values.
    DEBUG = os.getenv("DEBUG", "0").lower() in {"1", "true", "yes"}
    CONTACT_PHONE = os.getenv("CONTACT_PHONE", CONTACT_PHONE).strip() or CONTACT_PHONE
    CONTACT_EMAIL = os.getenv("CONTACT_EMAIL", CONTACT_EMAIL).strip() or CONTACT_EMAIL

    logging.basicConfig(
        level=logging.DEBUG if DEBUG else logging.INFO,
        format=_LOG_FORMAT,
    )


def redact_pii(value: str | None) -> str:
    """Mask PII for logging: show first 3 and last 2 chars only."""
    if not value or len(value) <= 5:
        return "***"
    return value[:3] + "***" + value[-2:]
