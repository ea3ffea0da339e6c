"""Normalize support staff roles

Revision ID: e8f1c3d5a769
Revises: d2a6b8e4f915
Create Date: 2025-09-11 13:15:25.740000

Maps the first role vocabulary onto DELEGATION_LEADER, MEDIC and
COMPANION. Unknown roles become COMPANION.

"""
from alembic import op

# revision identifiers, used by Alembic.
revision = 'e8f1c3d5a769'
down_revision = 'd2a6b8e4f915'
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.execute("UPDATE support_staff SET role = 'DELEGATION_LEADER' WHERE role = 'DELEGATE'")
    op.execute("UPDATE support_staff SET role = 'MEDIC' WHERE role = 'MEDICAL'")
    op.execute(
        "UPDATE support_staff SET role = 'COMPANION' "
        "WHERE role IS NULL OR role NOT IN ('DELEGATION_LEADER', 'MEDIC', 'COMPANION')"
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.execute("UPDATE support_staff SET role = 'DELEGATE' WHERE role = 'DELEGATION_LEADER'")
    op.execute("UPDATE support_staff SET role = 'MEDICAL' WHERE role = 'MEDIC'")
    op.execute("UPDATE support_staff SET role = 'SUPPORT' WHERE role = 'COMPANION'")
