"""
Tests for record summaries and ingestion.
"""

import pytest

from conftest import make_employee
from hr_chatbot.records.ingest import build_summary, ingest_employee


class TestBuildSummary:
    """Tests for build_summary()."""

    def test_summary_layout(self):
        """Fields appear in a fixed order with the expected separators."""
        summary = build_summary(make_employee())

        assert summary == (
            "Jane Doe, born on 1990-01-01. Job: Engineer in R&D. "
            "Skills: Python, Kubernetes. "
            "Reviews: Rated 4 on 2023-06-30: Consistently strong delivery. "
            "Rated 3.5 on 2022-06-30: Good progress.. "
            "Location: Works at Chicago, Remote: false. "
            "Notes: Mentors new hires."
        )

    def test_summary_is_deterministic(self):
        employee = make_employee()
        assert build_summary(employee) == build_summary(employee.model_copy(deep=True))

    def test_remote_flag_lowercase(self):
        employee = make_employee(work_location={"nearest_office": "Berlin", "is_remote": True})
        assert "Location: Works at Berlin, Remote: true." in build_summary(employee)

    def test_empty_skills_and_reviews(self):
        employee = make_employee(skills=[], performance_reviews=[])
        summary = build_summary(employee)

        assert "Skills: . Reviews: . Location:" in summary

    def test_summary_tracks_field_changes(self):
        before = build_summary(make_employee())
        after = build_summary(make_employee(job_details={
            "job_title": "Staff Engineer",
            "department": "Platform",
            "hire_date": "2018-03-15",
            "employment_type": "Full-time",
            "salary": 120000,
            "currency": "USD",
        }))

        assert before != after
        assert "Job: Staff Engineer in Platform." in after


class TestIngestEmployee:
    """Tests for ingest_employee()."""

    async def test_stores_summary_and_embedding(self, embedder, store):
        employee = make_employee()

        stored = await ingest_employee(employee, embedder=embedder, store=store)

        assert stored.summary == build_summary(employee)
        assert embedder.calls == [stored.summary]
        assert stored.embedding == await embedder.embed(stored.summary)
        assert await store.count() == 1

    async def test_reingest_replaces_record(self, embedder, store):
        await ingest_employee(make_employee(notes="First."), embedder=embedder, store=store)
        await ingest_employee(make_employee(notes="Second."), embedder=embedder, store=store)

        assert await store.count() == 1
        [match] = await store.similarity_search(await embedder.embed("Jane Doe"), k=5)
        assert match.record.notes == "Second."
        assert match.summary.endswith("Notes: Second.")

    async def test_embedding_failure_stores_nothing(self, store):
        class FailingEmbedder:
            async def embed(self, text):
                raise RuntimeError("embedding service down")

        with pytest.raises(RuntimeError):
            await ingest_employee(make_employee(), embedder=FailingEmbedder(), store=store)

        assert await store.count() == 0
