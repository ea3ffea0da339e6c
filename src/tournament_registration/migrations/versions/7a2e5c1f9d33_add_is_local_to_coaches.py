"""Add is_local to coaches

Revision ID: 7a2e5c1f9d33
Revises: 3f1c2a9d4b10
Create Date: 2023-09-15 02:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '7a2e5c1f9d33'
down_revision = '3f1c2a9d4b10'
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Upgrade database schema."""
    with op.batch_alter_table('coaches') as batch_op:
        batch_op.add_column(sa.Column('is_local', sa.Boolean(), nullable=False, server_default=sa.false()))


def downgrade() -> None:
    """Downgrade database schema."""
    with op.batch_alter_table('coaches') as batch_op:
        batch_op.drop_column('is_local')
