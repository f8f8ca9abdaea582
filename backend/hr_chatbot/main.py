from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

# Must come after load_dotenv so env vars are available
from hr_chatbot.agents.hr_agent import build_hr_agent  # noqa: E402
from hr_chatbot.api import chat, health                 # noqa: E402
from hr_chatbot.core.checkpointer import open_checkpointer  # noqa: E402
from hr_chatbot.core.config import get_settings        # noqa: E402
from hr_chatbot.core.logging import configure_logging, get_logger  # noqa: E402

configure_logging()
log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    async with open_checkpointer(settings) as checkpointer:
        app.state.agent = build_hr_agent(settings, checkpointer)
        log.info(
            "startup",
            version="0.1.0",
            environment=settings.environment,
            chat_model=settings.chat_model,
            record_store=settings.record_store_backend,
        )
        yield
    log.info("shutdown")


app = FastAPI(
    title="HR Chatbot",
    description="LangGraph agent answering questions over employee records",
    version="0.1.0",
    lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(chat.router)


def run() -> None:
    import uvicorn
    uvicorn.run("hr_chatbot.main:app", host="0.0.0.0", port=get_settings().port)


if __name__ == "__main__":
    run()
