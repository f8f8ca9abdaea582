"""
Chat API endpoints.

    POST /chat              start a thread   → {threadId, response}
    POST /chat/{threadId}   continue one     → {response}
    GET  /chat/{threadId}   persisted history → {threadId, messages}

Failures are logged with their kind and returned as a generic 500.
"""

import time

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from hr_chatbot.agents.hr_agent import HRChatAgent
from hr_chatbot.api.deps import get_agent
from hr_chatbot.core.errors import ChatbotError, TurnLimitExceeded
from hr_chatbot.core.logging import get_logger
from hr_chatbot.core.messages import message_role, message_text

log = get_logger(__name__)
router = APIRouter(prefix="/chat", tags=["chat"])


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)


def new_thread_id() -> str:
    """Current time in epoch milliseconds."""
    return str(time.time_ns() // 1_000_000)


def _error_response(exc: Exception, thread_id: str, event: str) -> JSONResponse:
    kind = exc.kind if isinstance(exc, ChatbotError) else "internal"
    log.error(event, thread_id=thread_id, error_kind=kind, error_type=type(exc).__name__, error=str(exc))

    body = {"error": "Internal server error"}
    if isinstance(exc, TurnLimitExceeded) and exc.last_answer:
        body["lastResponse"] = exc.last_answer
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


# ── Endpoints ─────────────────────────────────────────────────────────────────

@router.post("")
async def start_conversation(req: ChatRequest, agent: HRChatAgent = Depends(get_agent)):
    """Start a new conversation; the thread id is derived from the current time."""
    thread_id = new_thread_id()
    try:
        response = await agent.ask(req.message, thread_id)
    except Exception as exc:
        return _error_response(exc, thread_id, "start_conversation_failed")
    return {"threadId": thread_id, "response": response}


@router.post("/{thread_id}")
async def continue_conversation(
    thread_id: str,
    req: ChatRequest,
    agent: HRChatAgent = Depends(get_agent),
):
    """Send a message in an existing conversation."""
    try:
        response = await agent.ask(req.message, thread_id)
    except Exception as exc:
        return _error_response(exc, thread_id, "chat_failed")
    return {"response": response}


@router.get("/{thread_id}")
async def get_conversation(thread_id: str, agent: HRChatAgent = Depends(get_agent)):
    """Persisted messages of a conversation, oldest first."""
    try:
        messages = await agent.history(thread_id)
    except Exception as exc:
        return _error_response(exc, thread_id, "history_failed")
    return {
        "threadId": thread_id,
        "messages": [
            {"role": message_role(m), "content": message_text(m)} for m in messages
        ],
    }
