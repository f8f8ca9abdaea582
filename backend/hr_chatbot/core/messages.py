"""Helpers over the langchain message variants (System / Human / AI / Tool)."""

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage, ToolMessage


def message_text(message: BaseMessage) -> str:
    """
    Plain text of a message.

    Providers such as Anthropic return content as a list of blocks; only the
    text blocks are kept, in order.
    """
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def message_role(message: BaseMessage) -> str:
    if isinstance(message, SystemMessage):
        return "system"
    if isinstance(message, HumanMessage):
        return "human"
    if isinstance(message, AIMessage):
        return "ai"
    if isinstance(message, ToolMessage):
        return "tool"
    raise TypeError(f"Unsupported message type: {type(message).__name__}")
