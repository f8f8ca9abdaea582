"""
Failure taxonomy for a chat run.

Every error carries a ``kind`` tag so that logs and the HTTP layer can tell
them apart even though the user-visible response is the same for all of them:

  validation  - rejected tool arguments (reported back to the model)
  external    - embedding / chat / search / persistence call failed
  turn_limit  - agent ⇄ tools loop exceeded the recursion limit
  state       - routing saw a message history it cannot route
"""


class ChatbotError(Exception):
    kind = "internal"


class ToolArgumentsError(ChatbotError):
    kind = "validation"

    def __init__(self, tool_name: str, detail: str):
        super().__init__(f"Invalid arguments for {tool_name}: {detail}")
        self.tool_name = tool_name
        self.detail = detail


class ExternalServiceError(ChatbotError):
    kind = "external"

    def __init__(self, service: str, detail: str):
        super().__init__(f"{service} call failed: {detail}")
        self.service = service


class TurnLimitExceeded(ChatbotError):
    kind = "turn_limit"

    def __init__(self, thread_id: str, limit: int, last_answer: str | None = None):
        super().__init__(f"Thread {thread_id} exceeded {limit} supersteps")
        self.thread_id = thread_id
        self.limit = limit
        self.last_answer = last_answer


class InvalidConversationState(ChatbotError):
    kind = "state"
