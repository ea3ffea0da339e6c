"""Add club to registrable entities

Revision ID: d2a6b8e4f915
Revises: c9e3f7a1d248
Create Date: 2025-09-11 01:00:13.738000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'd2a6b8e4f915'
down_revision = 'c9e3f7a1d248'
branch_labels = None
depends_on = None

TABLES = ('choreographies', 'coaches', 'judges', 'support_staff')


def upgrade() -> None:
    """Upgrade database schema."""
    for table in TABLES:
        with op.batch_alter_table(table) as batch_op:
            batch_op.add_column(sa.Column('club', sa.String(length=255), nullable=True))


def downgrade() -> None:
    """Downgrade database schema."""
    for table in reversed(TABLES):
        with op.batch_alter_table(table) as batch_op:
            batch_op.drop_column('club')
