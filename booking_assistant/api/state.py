# Role: Read-only transparency endpoints for the chat widget and operators.
# Exposes the current booking snapshot by session_id, plus an explicit reset (start over with a fresh session).

from datetime import datetime

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from booking_assistant.api.deps import flow_controller
from booking_assistant.models.state import ConversationState

router = APIRouter(tags=["state"])


class MessageOut(BaseModel):
    role: str
    content: str
    timestamp: datetime


class StateSnapshot(BaseModel):
    session_id: str
    booking: dict
    missing_fields: list[str]
    is_complete: bool
    booking_persisted: bool
    booking_id: str | None
    last_mode: str | None
    turn_count: int
    messages: list[MessageOut]


def _snapshot(state: ConversationState) -> StateSnapshot:
    return StateSnapshot(
        session_id=state.session_id,
        booking=state.booking.known_fields(),
        missing_fields=state.missing_fields,
        is_complete=state.is_complete,
        booking_persisted=state.booking_persisted,
        booking_id=state.booking_id,
        last_mode=state.last_mode.value if state.last_mode else None,
        turn_count=state.turn_count,
        messages=[MessageOut(**m.model_dump()) for m in state.messages],
    )


@router.get("/state/{session_id}", response_model=StateSnapshot)
def get_state(session_id: str) -> StateSnapshot:
    state = flow_controller.get_state(session_id)
    if state is None:
        raise HTTPException(status_code=404, detail="Unknown session")
    return _snapshot(state)


@router.post("/state/{session_id}/reset", response_model=StateSnapshot)
def reset_state(session_id: str) -> StateSnapshot:
    return _snapshot(flow_controller.reset_session(session_id))
