"""Create document tables

Revision ID: 001
Revises: None
Create Date: 2024-06-01 00:00:00.000000+00:00

What:  Creates the accounts, answers, collections, questions and tags tables
       compiled from the document schemas in devflow/models/.
How:   Reference columns (author, question, user_id, questions) are plain UUID
       columns without foreign keys: references are not enforced.

Rollback: downgrade() drops all five tables (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _counter(name: str) -> sa.Column:
    return sa.Column(name, sa.Integer(), nullable=False, server_default=sa.text("0"))


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False, comment="ref: User"),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("password", sa.Text(), nullable=True),
        sa.Column("provider", sa.Text(), nullable=False),
        sa.Column("provider_account_id", sa.Text(), nullable=False, comment="Account id at the provider"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_accounts"),
        sa.UniqueConstraint("provider", "provider_account_id", name="uq_accounts_provider"),
    )

    op.create_table(
        "answers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("author", sa.Uuid(), nullable=False, comment="ref: User"),
        sa.Column("question", sa.Uuid(), nullable=False, comment="ref: Question"),
        sa.Column("answer", sa.Text(), nullable=False),
        _counter("upvotes"),
        _counter("downvotes"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_answers"),
    )

    op.create_table(
        "collections",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("author", sa.Uuid(), nullable=False, comment="ref: User"),
        sa.Column("questions", sa.Uuid(), nullable=False, comment="ref: Question"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_collections"),
    )

    op.create_table(
        "questions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author", sa.Uuid(), nullable=False, comment="ref: User"),
        _counter("answers"),
        sa.Column("tags", sa.JSON(), nullable=False, comment="ref: Tag"),
        _counter("views"),
        _counter("upvotes"),
        _counter("downvotes"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_questions"),
    )

    op.create_table(
        "tags",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        _counter("questions"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_tags"),
        sa.UniqueConstraint("name", name="uq_tags_name"),
    )


def downgrade() -> None:
    op.drop_table("tags")
    op.drop_table("questions")
    op.drop_table("collections")
    op.drop_table("answers")
    op.drop_table("accounts")
