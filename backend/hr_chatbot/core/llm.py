"""
LLM factory - returns the appropriate LangChain chat model based on LITELLM_MODE.

  proxy   → ChatOpenAI pointed at the LiteLLM proxy container (dev default)
  library → ChatLiteLLM using the litellm library in-process (production)

Both return the same LangChain BaseChatModel interface, so callers are unaware
of the underlying routing mechanism. Client-side retries are disabled: the
agent node retries through hr_chatbot.core.retry instead.
"""

from langchain_core.language_models.chat_models import BaseChatModel

from hr_chatbot.core.config import Settings


def get_chat_model(
    settings: Settings,
    *,
    model: str | None = None,
    temperature: float = 0.0,
) -> BaseChatModel:
    """
    Return a configured chat model.

    Args:
        settings:    Application settings (routing mode, endpoint, timeouts).
        model:       Override the model name. Defaults to settings.chat_model.
        temperature: Sampling temperature. 0 for answering, higher for seeding.
    """
    model_name = model or settings.chat_model

    if settings.litellm_mode == "library":
        from langchain_community.chat_models import ChatLiteLLM

        return ChatLiteLLM(
            model=model_name,
            temperature=temperature,
            request_timeout=settings.request_timeout_seconds,
            max_retries=0,
        )
    else:
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            base_url=settings.litellm_base_url,
            api_key=settings.litellm_master_key,
            model=model_name,
            temperature=temperature,
            timeout=settings.request_timeout_seconds,
            max_retries=0,
        )
