"""Registration status management

Revision ID: b41d8e6a2c57
Revises: 7a2e5c1f9d33
Create Date: 2024-12-29 16:00:00.000000

New registrations start as PENDING. Rows that existed before this
revision were already accepted by the organisers, so they are moved to
REGISTERED once, here. The downgrade restores the old defaults but keeps
row statuses, since the original values cannot be told apart.

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'b41d8e6a2c57'
down_revision = '7a2e5c1f9d33'
branch_labels = None
depends_on = None

PERSON_TABLES = ('coaches', 'judges', 'support_staff')
BACKFILL_TABLES = ('choreographies', 'coaches', 'judges')


def upgrade() -> None:
    """Upgrade database schema."""
    with op.batch_alter_table('choreographies') as batch_op:
        batch_op.add_column(sa.Column('status', sa.String(length=20), nullable=False, server_default='PENDING'))

    for table in PERSON_TABLES:
        with op.batch_alter_table(table) as batch_op:
            batch_op.alter_column(
                'status',
                existing_type=sa.String(length=20),
                existing_nullable=False,
                server_default='PENDING',
            )

    # One-time backfill of rows created before the workflow existed
    for table in BACKFILL_TABLES:
        op.execute(f"UPDATE {table} SET status = 'REGISTERED' WHERE status = 'PENDING'")


def downgrade() -> None:
    """Downgrade database schema."""
    for table in reversed(PERSON_TABLES):
        with op.batch_alter_table(table) as batch_op:
            batch_op.alter_column(
                'status',
                existing_type=sa.String(length=20),
                existing_nullable=False,
                server_default='REGISTERED',
            )

    with op.batch_alter_table('choreographies') as batch_op:
        batch_op.drop_column('status')
