"""Make coach levels optional

Revision ID: f5b9d2e7c381
Revises: e8f1c3d5a769
Create Date: 2025-09-15 01:16:37.142000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'f5b9d2e7c381'
down_revision = 'e8f1c3d5a769'
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Upgrade database schema."""
    with op.batch_alter_table('coaches') as batch_op:
        batch_op.alter_column('level', existing_type=sa.String(length=50), nullable=True)
        batch_op.alter_column('level_description', existing_type=sa.String(length=255), nullable=True)


def downgrade() -> None:
    """Downgrade database schema."""
    # NOT NULL cannot be restored over existing nulls
    op.execute("UPDATE coaches SET level = '' WHERE level IS NULL")
    op.execute("UPDATE coaches SET level_description = '' WHERE level_description IS NULL")
    with op.batch_alter_table('coaches') as batch_op:
        batch_op.alter_column('level', existing_type=sa.String(length=50), nullable=False)
        batch_op.alter_column('level_description', existing_type=sa.String(length=255), nullable=False)
