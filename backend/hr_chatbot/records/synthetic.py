"""Synthetic employee data generated by a chat model as structured output."""

from langchain_core.language_models.chat_models import BaseChatModel

from hr_chatbot.core.logging import get_logger
from hr_chatbot.records.models import EmployeeBatch, EmployeeRecord

log = get_logger(__name__)

_SYNTHETIC_PROMPT = """You are a helpful assistant that generates employee data. \
Generate {count} fictional employee records. Each record should include the following fields: \
employee_id, first_name, last_name, date_of_birth, address, contact_details, job_details, \
work_location, reporting_manager, skills, performance_reviews, benefits, emergency_contact, notes. \
Every employee_id must be unique. Ensure variety in the data and realistic values."""


async def generate_synthetic_employees(model: BaseChatModel, count: int = 10) -> list[EmployeeRecord]:
    """
    Ask ``model`` for ``count`` fictional employees, parsed into EmployeeRecords.

    Raises ValueError when the model returns no structured output or reuses
    an employee_id.
    """
    structured_llm = model.with_structured_output(EmployeeBatch)

    log.info("synthetic_generation_started", count=count)
    batch = await structured_llm.ainvoke(_SYNTHETIC_PROMPT.format(count=count))
    if batch is None:
        raise ValueError("Model returned no employee records")

    ids = [employee.employee_id for employee in batch.employees]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise ValueError(f"Generated records reuse employee_id: {', '.join(duplicates)}")

    log.info("synthetic_generation_done", generated=len(batch.employees))
    return batch.employees
