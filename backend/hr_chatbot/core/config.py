from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Database ───────────────────────────────────────────────────────────────
    database_url: str
    employees_table: str = "employees"

    # ── LiteLLM ───────────────────────────────────────────────────────────────
    # mode: "proxy" = external LiteLLM container (dev default)
    #       "library" = litellm imported directly (production, no network hop)
    litellm_mode: Literal["proxy", "library"] = "proxy"
    litellm_base_url: str = "http://litellm:4000/v1"
    litellm_master_key: str

    # ── Models ────────────────────────────────────────────────────────────────
    chat_model: str = "claude-3-5-sonnet-20240620"
    seed_model: str = "gpt-4o-mini"          # synthetic employee generation
    seed_temperature: float = 0.7
    embedding_model: str = "text-embedding-3-small"

    # ── Agent ─────────────────────────────────────────────────────────────────
    recursion_limit: int = 15                # agent ⇄ tools supersteps per run
    serialize_threads: bool = True           # one run at a time per thread_id

    # ── Resilience ────────────────────────────────────────────────────────────
    request_timeout_seconds: float = 30.0
    max_attempts: int = 3

    # ── Backends ──────────────────────────────────────────────────────────────
    checkpointer_backend: Literal["postgres", "memory"] = "postgres"
    # memory: process-local and starts empty. hr-chatbot-seed runs in its own
    # process, so a server on this backend never sees seeded records.
    record_store_backend: Literal["postgres", "memory"] = "postgres"

    # ── App ───────────────────────────────────────────────────────────────────
    environment: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]
    port: int = 3000

    model_config = {"env_file": ".env"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
