"""
Seed the employee store with synthetic records.

    hr-chatbot-seed --count 10
    python -m hr_chatbot.records.seed --keep-existing

Steps:
  1. Optionally clear the existing records.
  2. Generate synthetic employees with the seeding model.
  3. For each record: summary → embedding → upsert.
"""

import argparse
import asyncio
import sys

from dotenv import load_dotenv
from langchain_core.language_models.chat_models import BaseChatModel

from hr_chatbot.core.config import Settings, get_settings
from hr_chatbot.core.llm import get_chat_model
from hr_chatbot.core.logging import configure_logging, get_logger
from hr_chatbot.records.embeddings import Embedder
from hr_chatbot.records.ingest import ingest_employee
from hr_chatbot.records.store import EmployeeStore, build_employee_store
from hr_chatbot.records.synthetic import generate_synthetic_employees

log = get_logger(__name__)


async def seed_database(
    *,
    model: BaseChatModel,
    embedder: Embedder,
    store: EmployeeStore,
    count: int = 10,
    clear: bool = True,
) -> list[str]:
    """Generate and store ``count`` employees. Returns the saved employee ids."""
    if clear:
        removed = await store.clear()
        log.info("records_cleared", removed=removed)

    employees = await generate_synthetic_employees(model, count=count)

    saved = []
    for employee in employees:
        await ingest_employee(employee, embedder=embedder, store=store)
        saved.append(employee.employee_id)

    total = await store.count()
    log.info("seeding_complete", saved=len(saved), total=total)
    return saved


async def _main(settings: Settings, count: int, clear: bool) -> None:
    await seed_database(
        model=get_chat_model(settings, model=settings.seed_model, temperature=settings.seed_temperature),
        embedder=Embedder.from_settings(settings),
        store=build_employee_store(settings),
        count=count,
        clear=clear,
    )


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Seed the HR database with synthetic employees.")
    parser.add_argument("--count", type=int, default=10, help="Number of employees to generate")
    parser.add_argument(
        "--keep-existing", action="store_true", help="Do not delete existing records first"
    )
    args = parser.parse_args(argv)
    if args.count < 1:
        parser.error("--count must be a positive integer")

    settings = get_settings()
    configure_logging(settings.environment)

    try:
        asyncio.run(_main(settings, args.count, clear=not args.keep_existing))
    except Exception as exc:
        log.error("seeding_failed", error_type=type(exc).__name__, error=str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
