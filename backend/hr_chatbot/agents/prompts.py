from datetime import datetime, timezone

from langchain_core.messages import BaseMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

PERSONA = "You are a helpful HR Chatbot Agent."

SYSTEM_TEMPLATE = (
    "You are a helpful AI assistant, collaborating with other assistants. "
    "Use the provided tools to progress towards answering the question. "
    "If you are unable to fully answer, that's OK, another assistant with different tools "
    "will help where you left off. Execute what you can to make progress. "
    "If you or any of the other assistants have the final answer or deliverable, "
    "prefix your response with FINAL ANSWER so the team knows to stop. "
    "You have access to the following tools: {tool_names}.\n"
    "{system_message}\n"
    "Current time: {time}."
)

CHAT_PROMPT = ChatPromptTemplate.from_messages(
    [
        ("system", SYSTEM_TEMPLATE),
        MessagesPlaceholder("messages"),
    ]
)


def format_prompt(
    messages: list[BaseMessage],
    tool_names: list[str],
    *,
    now: datetime | None = None,
    persona: str = PERSONA,
) -> list[BaseMessage]:
    """System instructions followed by the full conversation history."""
    now = now or datetime.now(timezone.utc)
    return CHAT_PROMPT.format_messages(
        tool_names=", ".join(tool_names),
        system_message=persona,
        time=now.isoformat(),
        messages=messages,
    )
