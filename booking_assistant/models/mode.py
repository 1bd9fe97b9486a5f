# Role: Central enum of per-turn conversation modes. Keeps the system consistent across:
# intent classification, reply prompts, deterministic fallbacks, and the status mirrored to the store.

from enum import Enum


class Mode(str, Enum):
    NORMAL = "normal"
    CONFIRM = "confirm"
    CANCELLED = "cancelled"
    OUT_OF_REGION = "out_of_region"
    UPDATE = "update"


# Conversation status written when a session is explicitly started (before any turn has a mode).
INITIATED_STATUS = "initiated"
