"""initial_localization_schema

Revision ID: 5a1c0e7d9b21
Revises:
Create Date: 2026-09-14 10:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "5a1c0e7d9b21"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "translations",
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column(
            "texts",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'{}'::jsonb"),
            nullable=False,
        ),
        sa.Column(
            "locale_status",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'{}'::jsonb"),
            nullable=False,
        ),
        sa.Column("auto_translated", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("needs_review", sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("key"),
    )
    op.create_index(
        op.f("ix_translations_needs_review"),
        "translations",
        ["needs_review"],
        unique=False,
    )

    op.create_table(
        "site_content",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("section", sa.String(length=100), nullable=False),
        sa.Column("tag", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("section", "tag", name="uq_site_content_section_tag"),
    )
    op.create_index(
        op.f("ix_site_content_section"),
        "site_content",
        ["section"],
        unique=False,
    )

    op.create_table(
        "translation_jobs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column("source_text", sa.Text(), nullable=False),
        sa.Column("source_locale", sa.String(length=10), nullable=False),
        sa.Column(
            "target_locales",
            postgresql.JSONB(astext_type=sa.Text()),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column("context", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("attempt_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("max_attempts", sa.Integer(), server_default="3", nullable=False),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_translation_jobs_key"),
        "translation_jobs",
        ["key"],
        unique=False,
    )
    op.create_index(
        op.f("ix_translation_jobs_status"),
        "translation_jobs",
        ["status"],
        unique=False,
    )
    op.create_index(
        "uq_translation_jobs_active_key",
        "translation_jobs",
        ["key"],
        unique=True,
        postgresql_where=sa.text("status != 'completed'"),
    )


def downgrade() -> None:
    op.drop_index("uq_translation_jobs_active_key", table_name="translation_jobs")
    op.drop_index(op.f("ix_translation_jobs_status"), table_name="translation_jobs")
    op.drop_index(op.f("ix_translation_jobs_key"), table_name="translation_jobs")
    op.drop_table("translation_jobs")
    op.drop_index(op.f("ix_site_content_section"), table_name="site_content")
    op.drop_table("site_content")
    op.drop_index(op.f("ix_translations_needs_review"), table_name="translations")
    op.drop_table("translations")
