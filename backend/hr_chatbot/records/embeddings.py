"""
Text embedder - turns record summaries and lookup queries into vectors.

  proxy   → POST {litellm_base_url}/embeddings via httpx
  library → litellm.aembedding in-process

Each call goes through the retry boundary with a per-attempt timeout; a
failure that survives the retries raises ExternalServiceError("embedding").
"""

from hr_chatbot.core.config import Settings
from hr_chatbot.core.retry import call_external


class Embedder:
    def __init__(
        self,
        *,
        model: str,
        mode: str = "proxy",
        base_url: str = "",
        api_key: str = "",
        timeout: float = 30.0,
        max_attempts: int = 3,
    ):
        self.model = model
        self.mode = mode
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.max_attempts = max_attempts

    @classmethod
    def from_settings(cls, settings: Settings) -> "Embedder":
        return cls(
            model=settings.embedding_model,
            mode=settings.litellm_mode,
            base_url=settings.litellm_base_url,
            api_key=settings.litellm_master_key,
            timeout=settings.request_timeout_seconds,
            max_attempts=settings.max_attempts,
        )

    async def embed(self, text: str) -> list[float]:
        """Embed one piece of text."""
        return await call_external(
            "embedding",
            lambda: self._request(text),
            max_attempts=self.max_attempts,
            timeout=self.timeout,
        )

    async def _request(self, text: str) -> list[float]:
        if self.mode == "library":
            import litellm
            response = await litellm.aembedding(model=self.model, input=[text])
            item = response.data[0]
            return list(item["embedding"] if isinstance(item, dict) else item.embedding)

        import httpx
        async with httpx.AsyncClient() as client:
            resp = await client.post(
                f"{self.base_url}/embeddings",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={"model": self.model, "input": text},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return resp.json()["data"][0]["embedding"]
