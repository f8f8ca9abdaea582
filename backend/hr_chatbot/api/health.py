from fastapi import APIRouter, Depends

from hr_chatbot.api.deps import get_app_settings
from hr_chatbot.core.config import Settings
from hr_chatbot.core.db import ping

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(settings: Settings = Depends(get_app_settings)):
    """Health check endpoint.  Verifies the Postgres connection is reachable."""
    try:
        await ping(settings.database_url)
        db_status = "ok"
    except Exception as exc:
        db_status = f"error: {exc}"

    return {"status": "ok", "database": db_status}
