"""
Agent tool definitions.

Tools are registered with the LLM via bind_tools() and executed by the
graph's tools node (see nodes.py), which validates arguments against each
tool's args_schema before the tool body runs.

Current tools:
  - employee_lookup: similarity search over the employee record store
"""

import json

from langchain_core.tools import BaseTool, StructuredTool
from pydantic import BaseModel, Field, PositiveInt

from hr_chatbot.core.logging import get_logger
from hr_chatbot.records.embeddings import Embedder
from hr_chatbot.records.store import EmployeeStore

log = get_logger(__name__)

EMPLOYEE_LOOKUP = "employee_lookup"


class EmployeeLookupInput(BaseModel):
    query: str = Field(description="The search query")
    n: PositiveInt = Field(default=10, description="Number of results to return")


def build_employee_lookup_tool(embedder: Embedder, store: EmployeeStore) -> BaseTool:
    """
    Bind the lookup tool to a concrete embedder and record store.

    Returns a JSON array of {"record": {...}, "score": float}, best match first,
    at most ``n`` entries. Embedding / search failures propagate.
    """

    async def employee_lookup(query: str, n: int = 10) -> str:
        log.info("employee_lookup_called", tool_name=EMPLOYEE_LOOKUP, n=n)
        embedding = await embedder.embed(query)
        matches = await store.similarity_search(embedding, k=n)
        matches = sorted(matches, key=lambda m: m.score, reverse=True)[:n]
        log.debug("employee_lookup_done", tool_name=EMPLOYEE_LOOKUP, returned=len(matches))
        return json.dumps([m.to_payload() for m in matches])

    return StructuredTool.from_function(
        coroutine=employee_lookup,
        name=EMPLOYEE_LOOKUP,
        description="Gathers employee details from the HR database",
        args_schema=EmployeeLookupInput,
    )
