"""
HR chat agent - graph assembly and the per-thread run loop.

    START → agent → (should_continue) → END
              ↑            ↓ tool_calls
              └────── tools

agent:            LLM with employee_lookup bound - produces text or tool_calls
should_continue:  routes to tools or END
tools:            validates and executes tool calls, loops back to agent

Every dependency (chat model, tools, checkpointer) is handed in by the
caller; build_hr_agent() wires the production ones from Settings.
"""

from datetime import datetime
from typing import Callable

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolMessage
from langchain_core.tools import BaseTool
from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.errors import GraphRecursionError
from langgraph.graph import END, START, StateGraph

from hr_chatbot.agents.nodes import ChatNodes, should_continue
from hr_chatbot.agents.tools import build_employee_lookup_tool
from hr_chatbot.core.checkpointer import ThreadLocks
from hr_chatbot.core.config import Settings
from hr_chatbot.core.errors import TurnLimitExceeded
from hr_chatbot.core.graph_state import ChatState
from hr_chatbot.core.llm import get_chat_model
from hr_chatbot.core.logging import get_logger
from hr_chatbot.core.messages import message_text
from hr_chatbot.records.embeddings import Embedder
from hr_chatbot.records.store import EmployeeStore, build_employee_store

log = get_logger(__name__)


def build_chat_graph(nodes: ChatNodes, checkpointer: BaseCheckpointSaver):
    """Compile the agent ⇄ tools graph with the given checkpointer."""
    workflow = StateGraph(ChatState)

    # Nodes
    workflow.add_node("agent", nodes.call_model)
    workflow.add_node("tools", nodes.call_tools)

    # Edges
    workflow.add_edge(START, "agent")
    workflow.add_conditional_edges(
        "agent",
        should_continue,
        {"tools": "tools", END: END},
    )
    workflow.add_edge("tools", "agent")  # loop: tool results → agent reasoning

    return workflow.compile(checkpointer=checkpointer)


class HRChatAgent:
    def __init__(
        self,
        model: BaseChatModel,
        tools: list[BaseTool],
        checkpointer: BaseCheckpointSaver,
        *,
        recursion_limit: int = 15,
        serialize_threads: bool = True,
        clock: Callable[[], datetime] | None = None,
        timeout: float | None = None,
        max_attempts: int = 3,
    ):
        nodes = ChatNodes(model, tools, clock=clock, timeout=timeout, max_attempts=max_attempts)
        self.graph = build_chat_graph(nodes, checkpointer)
        self.recursion_limit = recursion_limit
        self._locks = ThreadLocks() if serialize_threads else None

    async def ask(self, message: str, thread_id: str) -> str:
        """
        Append ``message`` to the thread, run the graph to completion and
        return the text of the final message.

        Raises TurnLimitExceeded when the agent ⇄ tools loop runs past the
        recursion limit; other failures propagate unchanged.
        """
        if self._locks is None:
            return await self._run(message, thread_id)
        async with self._locks.for_thread(thread_id):
            return await self._run(message, thread_id)

    async def history(self, thread_id: str) -> list[BaseMessage]:
        """Persisted messages for ``thread_id``; empty for an unknown thread."""
        snapshot = await self.graph.aget_state(_thread_config(thread_id))
        if not snapshot or not snapshot.values:
            return []
        return list(snapshot.values.get("messages", []))

    async def _run(self, message: str, thread_id: str) -> str:
        config = {**_thread_config(thread_id), "recursion_limit": self.recursion_limit}
        before = len(await self.history(thread_id))

        try:
            result = await self.graph.ainvoke(
                {"messages": [HumanMessage(content=message)]},
                config=config,
            )
        except GraphRecursionError as exc:
            last_answer = await self._last_answer(thread_id, since=before)
            closed = await self._close_pending_tool_calls(thread_id)
            log.error(
                "turn_limit_exceeded",
                thread_id=thread_id,
                limit=self.recursion_limit,
                has_partial_answer=last_answer is not None,
                closed_tool_calls=closed,
            )
            raise TurnLimitExceeded(thread_id, self.recursion_limit, last_answer) from exc

        messages = result["messages"]
        log.info("chat_complete", thread_id=thread_id, messages=len(messages), added=len(messages) - before)
        return message_text(messages[-1])

    async def _last_answer(self, thread_id: str, since: int) -> str | None:
        """Latest non-empty AI text produced by the aborted run, if any."""
        for message in reversed((await self.history(thread_id))[since:]):
            if isinstance(message, AIMessage):
                text = message_text(message).strip()
                if text:
                    return text
        return None

    async def _close_pending_tool_calls(self, thread_id: str) -> int:
        """
        Answer tool calls the aborted run never executed.

        An AIMessage whose tool calls have no ToolMessage is rejected by the
        chat providers on the next turn, so each open call gets an error
        result appended as if the tools node had produced it.
        """
        messages = await self.history(thread_id)
        last_ai = next(
            (i for i in range(len(messages) - 1, -1, -1) if isinstance(messages[i], AIMessage)),
            None,
        )
        if last_ai is None:
            return 0

        answered = {
            m.tool_call_id for m in messages[last_ai + 1:] if isinstance(m, ToolMessage)
        }
        pending = [
            ToolMessage(
                content="Error: the turn limit was reached before this tool call ran.",
                tool_call_id=call.get("id") or "",
                name=call["name"],
                status="error",
            )
            for call in messages[last_ai].tool_calls
            if (call.get("id") or "") not in answered
        ]
        if pending:
            await self.graph.aupdate_state(
                _thread_config(thread_id), {"messages": pending}, as_node="tools"
            )
        return len(pending)


def _thread_config(thread_id: str) -> dict:
    return {"configurable": {"thread_id": thread_id}}


def build_hr_agent(
    settings: Settings,
    checkpointer: BaseCheckpointSaver,
    *,
    model: BaseChatModel | None = None,
    embedder: Embedder | None = None,
    store: EmployeeStore | None = None,
) -> HRChatAgent:
    """Wire the production agent from settings; any dependency may be overridden."""
    model = model or get_chat_model(settings, temperature=0.0)
    embedder = embedder or Embedder.from_settings(settings)
    store = store or build_employee_store(settings)

    return HRChatAgent(
        model,
        [build_employee_lookup_tool(embedder, store)],
        checkpointer,
        recursion_limit=settings.recursion_limit,
        serialize_threads=settings.serialize_threads,
        timeout=settings.request_timeout_seconds,
        max_attempts=settings.max_attempts,
    )
