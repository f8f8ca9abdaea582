from typing import Annotated, TypedDict

from langchain_core.messages import AnyMessage
from langgraph.graph.message import add_messages


class ChatState(TypedDict):
    """Conversation state persisted per thread_id by the checkpointer."""
    messages: Annotated[list[AnyMessage], add_messages]  # append-only history
