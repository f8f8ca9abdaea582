"""Employee record store with an HNSW cosine index over the embeddings.

The table name comes from Settings.employees_table (EMPLOYEES_TABLE), the
same setting the application's record store queries.

The LangGraph checkpoint tables are not managed here; AsyncPostgresSaver.setup()
creates them on application startup.

Revision ID: 001
Revises:
Create Date: 2026-10-16
"""

revision = "001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op

from hr_chatbot.core.config import get_settings


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def upgrade() -> None:
    table = get_settings().employees_table

    op.execute("CREATE EXTENSION IF NOT EXISTS vector")

    op.execute(f"""
        CREATE TABLE IF NOT EXISTS {_quote(table)} (
            employee_id  TEXT PRIMARY KEY,
            record       JSONB NOT NULL,
            summary      TEXT NOT NULL,
            embedding    vector(1536) NOT NULL,
            created_at   TIMESTAMPTZ DEFAULT now(),
            updated_at   TIMESTAMPTZ DEFAULT now()
        )
    """)
    op.execute(f"""
        CREATE INDEX IF NOT EXISTS {_quote(f"idx_{table}_embedding")}
        ON {_quote(table)} USING hnsw (embedding vector_cosine_ops)
        WITH (m = 16, ef_construction = 64)
    """)


def downgrade() -> None:
    op.execute(f"DROP TABLE IF EXISTS {_quote(get_settings().employees_table)}")
