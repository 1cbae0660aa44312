"""create_lessons_table

Revision ID: 5c1e2a7f9b34
Revises:
Create Date: 2026-10-19 09:12:41.118204

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5c1e2a7f9b34"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
  """Upgrade schema."""
  op.create_table(
    "lessons",
    sa.Column("lesson_id", sa.String(), nullable=False),
    sa.Column("title", sa.String(), nullable=False),
    sa.Column("outline", sa.Text(), nullable=False),
    sa.Column("status", sa.String(), nullable=False),
    sa.Column("generated_content", sa.Text(), nullable=True),
    sa.Column("error_message", sa.Text(), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.PrimaryKeyConstraint("lesson_id"),
  )
  op.create_index("ix_lessons_status_created_at", "lessons", ["status", "created_at"], unique=False)
  op.create_index(op.f("ix_lessons_created_at"), "lessons", ["created_at"], unique=False)


def downgrade() -> None:
  """Downgrade schema."""
  op.drop_index(op.f("ix_lessons_created_at"), table_name="lessons")
  op.drop_index("ix_lessons_status_created_at", table_name="lessons")
  op.drop_table("lessons")
