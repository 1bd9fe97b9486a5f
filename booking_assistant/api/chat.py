# Role: Thin HTTP adapter for the chat endpoints. Validates request/response shapes and delegates the entire
# conversation turn to FlowController (business logic lives in core, not in the API layer).

import logging

from fastapi import APIRouter
from pydantic import BaseModel, Field

from booking_assistant.api.deps import flow_controller
from booking_assistant.core.fallback_handler import technical_difficulty_message

log = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


class SessionResponse(BaseModel):
    session_id: str


class ChatRequest(BaseModel):
    session_id: str = Field(min_length=1)
    user_message: str = Field(min_length=1)


class ChatResponse(BaseModel):
    session_id: str
    response: str
    booking_ready: bool


@router.post("/sessions", response_model=SessionResponse)
def start_session() -> SessionResponse:
    state = flow_controller.start_session()
    return SessionResponse(session_id=state.session_id)


@router.post("/chat", response_model=ChatResponse)
def chat(req: ChatRequest) -> ChatResponse:
    # 1) Forward (session_id, user_message) to the orchestrator
    # 2) Return the reply in a stable schema for the chat widget
    # 3) Never surface raw errors: last-resort apology keeps the conversation open
    try:
        result = flow_controller.process_message(req.session_id, req.user_message)
    except Exception:
        log.exception("Turn failed for session %s", req.session_id)
        return ChatResponse(
            session_id=req.session_id,
            response=technical_difficulty_message(),
            booking_ready=False,
        )
    return ChatResponse(
        session_id=result.session_id,
        response=result.response,
        booking_ready=result.booking_ready,
    )
