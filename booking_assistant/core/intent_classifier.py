# Role: Cheap pattern checks that tag a chat turn (cancellation / out-of-region / correction) and collapse the
# signals into a single Mode with a fixed precedence. No LLM involved: runs before extraction on every turn.

from __future__ import annotations

import re
from dataclasses import dataclass

from booking_assistant.models.mode import Mode

_CANCEL = re.compile(
    r"(cancel(?:\s+the)?\s+booking|not interested|changed my mind|stop booking)",
    re.IGNORECASE,
)

# Key line: service area is the UK only; these are the places/phrases we explicitly turn away.
_OUT_OF_REGION = re.compile(
    r"\b(new york|paris|berlin|dubai|tokyo|usa|france|germany|spain|italy|japan|india|pakistan|"
    r"outside (?:the )?uk|international|abroad)\b",
    re.IGNORECASE,
)

_UPDATE = re.compile(r"\b(change|update|modify|edit|correction|i meant|replace)", re.IGNORECASE)


@dataclass(frozen=True)
class IntentSignals:
    cancelled: bool = False
    out_of_region: bool = False
    update: bool = False


def classify_signals(message: str) -> IntentSignals:
    text = message or ""
    return IntentSignals(
        cancelled=bool(_CANCEL.search(text)),
        out_of_region=bool(_OUT_OF_REGION.search(text)),
        update=bool(_UPDATE.search(text)),
    )


def resolve_mode(signals: IntentSignals, was_complete: bool) -> Mode:
    # Precedence: cancelled > out_of_region > update > confirm > normal.
    # was_complete is the record's state BEFORE this turn's extraction.
    if signals.cancelled:
        return Mode.CANCELLED
    if signals.out_of_region:
        return Mode.OUT_OF_REGION
    if signals.update:
        return Mode.UPDATE
    if was_complete:
        return Mode.CONFIRM
    return Mode.NORMAL


def classify_mode(message: str, was_complete: bool) -> Mode:
    return resolve_mode(classify_signals(message), was_complete)
