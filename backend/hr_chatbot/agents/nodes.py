"""
LangGraph node implementations.

Graph topology:

    START → agent → (should_continue) → END
              ↑            ↓ tool_calls present
              └────── tools

agent (ChatNodes.call_model):
    - System instructions + full message history
    - LLM bound with tools - returns one AIMessage (text or tool_calls)

should_continue (router):
    - "tools"   → last message is an AIMessage with tool calls
    - END       → last message is an AIMessage without tool calls
    - raises InvalidConversationState for anything else

tools (ChatNodes.call_tools):
    - Validates each tool call's arguments against the tool's args_schema
    - Runs the calls of one AIMessage concurrently, results in call order
    - Rejected calls become error ToolMessages the model can correct
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, ToolCall, ToolMessage
from langchain_core.tools import BaseTool
from langgraph.graph import END
from pydantic import ValidationError

from hr_chatbot.agents.prompts import format_prompt
from hr_chatbot.core.errors import InvalidConversationState, ToolArgumentsError
from hr_chatbot.core.graph_state import ChatState
from hr_chatbot.core.logging import get_logger
from hr_chatbot.core.retry import call_external

log = get_logger(__name__)


class ChatNodes:
    def __init__(
        self,
        model: BaseChatModel,
        tools: list[BaseTool],
        *,
        clock: Callable[[], datetime] | None = None,
        timeout: float | None = None,
        max_attempts: int = 3,
    ):
        self.tools_by_name = {tool.name: tool for tool in tools}
        self.model = model.bind_tools(tools)
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.timeout = timeout
        self.max_attempts = max_attempts

    # ── agent ──────────────────────────────────────────────────────────────────

    async def call_model(self, state: ChatState) -> dict:
        prompt = format_prompt(state["messages"], list(self.tools_by_name), now=self.clock())
        response = await call_external(
            "chat_model",
            lambda: self.model.ainvoke(prompt),
            max_attempts=self.max_attempts,
            timeout=self.timeout,
        )
        if not isinstance(response, AIMessage):
            raise InvalidConversationState(
                f"Chat model returned {type(response).__name__}, expected AIMessage"
            )

        log.debug(
            "agent_response",
            tool_calls=len(response.tool_calls),
            content_length=len(response.content) if response.content else 0,
        )
        return {"messages": [response]}

    # ── tools ──────────────────────────────────────────────────────────────────

    async def call_tools(self, state: ChatState) -> dict:
        last = state["messages"][-1] if state["messages"] else None
        if not isinstance(last, AIMessage) or not last.tool_calls:
            raise InvalidConversationState("tools node reached without pending tool calls")

        results = await asyncio.gather(*(self._run_tool_call(call) for call in last.tool_calls))
        return {"messages": list(results)}

    async def _run_tool_call(self, call: ToolCall) -> ToolMessage:
        name = call["name"]
        call_id = call.get("id") or ""
        try:
            tool, args = self._validate(call)
        except ToolArgumentsError as exc:
            log.warning("tool_call_rejected", tool_name=name, error_type=exc.kind, detail=exc.detail)
            return ToolMessage(
                content=f"Error: {exc}. Fix the arguments and try again.",
                tool_call_id=call_id,
                name=name,
                status="error",
            )

        output = await tool.ainvoke(args)
        return ToolMessage(content=output, tool_call_id=call_id, name=tool.name)

    def _validate(self, call: ToolCall) -> tuple[BaseTool, dict]:
        tool = self.tools_by_name.get(call["name"])
        if tool is None:
            raise ToolArgumentsError(call["name"], "no such tool")

        schema = tool.args_schema
        try:
            parsed = schema.model_validate(call.get("args") or {})
        except ValidationError as exc:
            detail = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'args'}: {err['msg']}" for err in exc.errors()
            )
            raise ToolArgumentsError(tool.name, detail) from exc
        return tool, parsed.model_dump()


# ── Router (conditional edge function) ────────────────────────────────────────

def should_continue(state: ChatState) -> str:
    """
    Inspect the last message.
    Returns "tools" to route to the tool executor, or END to finish the graph.
    """
    messages = state["messages"]
    last = messages[-1] if messages else None

    if not isinstance(last, AIMessage):
        kind = type(last).__name__ if last is not None else "empty history"
        log.error("routing_failed", last_message=kind)
        raise InvalidConversationState(f"Cannot route after {kind}; expected AIMessage")

    if last.tool_calls:
        return "tools"
    return END
