"""
Shared fixtures: scripted chat model, deterministic embedder, employee factory.

Settings are read from the environment at import time by hr_chatbot.main, so
the required variables are set before any hr_chatbot import.
"""

import os

os.environ.setdefault("DATABASE_URL", "postgresql://hr:hr@localhost:5432/hr_test")
os.environ.setdefault("LITELLM_MASTER_KEY", "test-key")
os.environ.setdefault("ENVIRONMENT", "test")

import re
import zlib
from datetime import datetime, timezone

import pytest
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from langgraph.checkpoint.memory import InMemorySaver
from pydantic import Field

from hr_chatbot.agents.hr_agent import HRChatAgent
from hr_chatbot.agents.tools import build_employee_lookup_tool
from hr_chatbot.records.models import EmployeeRecord
from hr_chatbot.records.store import InMemoryEmployeeStore

FIXED_NOW = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


class ScriptedChatModel(BaseChatModel):
    """Replies with the scripted AIMessages in order; records every prompt it receives."""

    script: list[AIMessage] = Field(default_factory=list)
    repeat_last: bool = False
    prompts: list[list[BaseMessage]] = Field(default_factory=list)

    @property
    def _llm_type(self) -> str:
        return "scripted"

    def _generate(self, messages, stop=None, run_manager=None, **kwargs) -> ChatResult:
        self.prompts.append(list(messages))
        index = len(self.prompts) - 1
        if index >= len(self.script):
            if not self.repeat_last:
                raise AssertionError("chat model called more often than scripted")
            index = len(self.script) - 1
        template = self.script[index]
        # fresh message each call: add_messages assigns ids in place
        reply = AIMessage(content=template.content, tool_calls=list(template.tool_calls))
        return ChatResult(generations=[ChatGeneration(message=reply)])

    def bind_tools(self, tools, **kwargs):
        return self


class KeywordEmbedder:
    """Bag-of-words hashed into a fixed number of buckets. Deterministic, offline."""

    def __init__(self, dims: int = 256):
        self.dims = dims
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        vector = [0.0] * self.dims
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            vector[zlib.crc32(token.encode()) % self.dims] += 1.0
        return vector


def lookup_call(query: str, n=None, call_id: str = "call_1") -> dict:
    args = {"query": query}
    if n is not None:
        args["n"] = n
    return {"name": "employee_lookup", "args": args, "id": call_id}


def make_employee(**overrides) -> EmployeeRecord:
    data = {
        "employee_id": "E001",
        "first_name": "Jane",
        "last_name": "Doe",
        "date_of_birth": "1990-01-01",
        "address": {
            "street": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "postal_code": "62701",
            "country": "USA",
        },
        "contact_details": {"email": "jane.doe@acmecorp.com", "phone_number": "+1-555-0100"},
        "job_details": {
            "job_title": "Engineer",
            "department": "R&D",
            "hire_date": "2018-03-15",
            "employment_type": "Full-time",
            "salary": 95000,
            "currency": "USD",
        },
        "work_location": {"nearest_office": "Chicago", "is_remote": False},
        "reporting_manager": "E100",
        "skills": ["Python", "Kubernetes"],
        "performance_reviews": [
            {"review_date": "2023-06-30", "rating": 4, "comments": "Consistently strong delivery."},
            {"review_date": "2022-06-30", "rating": 3.5, "comments": "Good progress."},
        ],
        "benefits": {"health_insurance": "Gold", "retirement_plan": "401k", "paid_time_off": 20},
        "emergency_contact": {"name": "John Doe", "relationship": "Spouse", "phone_number": "+1-555-0101"},
        "notes": "Mentors new hires.",
    }
    data.update(overrides)
    return EmployeeRecord.model_validate(data)


@pytest.fixture
def embedder():
    return KeywordEmbedder()


@pytest.fixture
def store():
    return InMemoryEmployeeStore()


@pytest.fixture
def checkpointer():
    return InMemorySaver()


@pytest.fixture
def build_agent(embedder, store, checkpointer):
    """Factory: HRChatAgent over the in-memory store with a scripted model."""

    def _build(model: ScriptedChatModel, **kwargs) -> HRChatAgent:
        return HRChatAgent(
            model,
            [build_employee_lookup_tool(embedder, store)],
            checkpointer,
            clock=lambda: FIXED_NOW,
            **kwargs,
        )

    return _build
