"""FastAPI dependencies - objects built once in the lifespan hook and kept on app.state."""

from fastapi import Request

from hr_chatbot.agents.hr_agent import HRChatAgent
from hr_chatbot.core.config import Settings, get_settings


def get_agent(request: Request) -> HRChatAgent:
    return request.app.state.agent


def get_app_settings() -> Settings:
    return get_settings()
