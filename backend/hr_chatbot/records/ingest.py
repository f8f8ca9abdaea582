"""
Record ingestion - summary, embedding, upsert.

The summary is the only text the similarity index ever sees, so it must be a
faithful, order-stable projection of the record: same record in, same text out.
"""

from hr_chatbot.core.logging import get_logger
from hr_chatbot.records.embeddings import Embedder
from hr_chatbot.records.models import EmployeeRecord, StoredEmployee
from hr_chatbot.records.store import EmployeeStore

log = get_logger(__name__)


def build_summary(employee: EmployeeRecord) -> str:
    """
    Human-readable summary of an employee, used for embedding and search.

    Layout:
        "{first} {last}, born on {dob}. Job: {title} in {department}.
         Skills: {a, b}. Reviews: {Rated r on d: c ...}.
         Location: Works at {office}, Remote: {true|false}. Notes: {notes}"
    """
    job = employee.job_details
    basic_info = f"{employee.first_name} {employee.last_name}, born on {employee.date_of_birth}"
    job_details = f"{job.job_title} in {job.department}"
    skills = ", ".join(employee.skills)
    reviews = " ".join(
        f"Rated {_number(review.rating)} on {review.review_date}: {review.comments}"
        for review in employee.performance_reviews
    )
    location = employee.work_location
    work_location = (
        f"Works at {location.nearest_office}, Remote: {str(location.is_remote).lower()}"
    )

    return (
        f"{basic_info}. Job: {job_details}. Skills: {skills}. Reviews: {reviews}. "
        f"Location: {work_location}. Notes: {employee.notes}"
    )


async def ingest_employee(
    employee: EmployeeRecord,
    *,
    embedder: Embedder,
    store: EmployeeStore,
) -> StoredEmployee:
    """Derive summary + embedding for one record and upsert it."""
    summary = build_summary(employee)
    embedding = await embedder.embed(summary)
    stored = StoredEmployee(record=employee, summary=summary, embedding=embedding)
    await store.upsert(stored)
    log.info("record_saved", employee_id=employee.employee_id)
    return stored


def _number(value: float) -> str:
    # 4.0 → "4", 4.5 → "4.5"
    return f"{value:g}"
