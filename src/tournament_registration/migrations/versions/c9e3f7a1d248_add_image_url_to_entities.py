"""Add image_url to gymnasts, coaches, judges and support staff

Revision ID: c9e3f7a1d248
Revises: b41d8e6a2c57
Create Date: 2025-07-14 12:26:18.680000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'c9e3f7a1d248'
down_revision = 'b41d8e6a2c57'
branch_labels = None
depends_on = None

TABLES = ('gymnasts', 'coaches', 'judges', 'support_staff')


def upgrade() -> None:
    """Upgrade database schema."""
    for table in TABLES:
        with op.batch_alter_table(table) as batch_op:
            batch_op.add_column(sa.Column('image_url', sa.String(length=500), nullable=True))


def downgrade() -> None:
    """Downgrade database schema."""
    for table in reversed(TABLES):
        with op.batch_alter_table(table) as batch_op:
            batch_op.drop_column('image_url')
