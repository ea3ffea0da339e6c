"""Initial schema

Revision ID: 3f1c2a9d4b10
Revises:
Create Date: 2023-09-10 10:00:00.000000

Coaches, judges and support staff were registered directly, so their
status defaulted to REGISTERED and choreographies had no status at all.
Support roles used the first role vocabulary (DELEGATE, MEDICAL, SUPPORT).

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3f1c2a9d4b10'
down_revision = None
branch_labels = None
depends_on = None


def _registration_columns():
    return [
        sa.Column('tournament_id', sa.String(length=36), nullable=False),
        sa.Column('country', sa.String(length=10), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['tournament_id'], ['tournaments.id'], ondelete='CASCADE'),
    ]


def _registration_indexes(table):
    op.create_index(op.f(f'ix_{table}_tournament_id'), table, ['tournament_id'], unique=False)
    op.create_index(op.f(f'ix_{table}_country'), table, ['country'], unique=False)


def upgrade() -> None:
    """Upgrade database schema."""

    # Create users table
    op.create_table('users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('country', sa.String(length=10), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)
    op.create_index(op.f('ix_users_country'), 'users', ['country'], unique=False)

    # Create tournaments table
    op.create_table('tournaments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('short_name', sa.String(length=100), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_tournaments_type'), 'tournaments', ['type'], unique=False)

    # Create gymnasts table
    op.create_table('gymnasts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('fig_id', sa.String(length=50), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('gender', sa.String(length=10), nullable=False),
        sa.Column('country', sa.String(length=10), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=False),
        sa.Column('discipline', sa.String(length=10), nullable=False),
        sa.Column('license_valid', sa.Boolean(), nullable=False),
        sa.Column('license_expiry_date', sa.Date(), nullable=True),
        sa.Column('age', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('is_local', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_gymnasts_fig_id'), 'gymnasts', ['fig_id'], unique=True)
    op.create_index(op.f('ix_gymnasts_country'), 'gymnasts', ['country'], unique=False)

    # Create choreographies table
    op.create_table('choreographies',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('type', sa.String(length=10), nullable=False),
        sa.Column('gymnast_count', sa.Integer(), nullable=False),
        sa.Column('oldest_gymnast_age', sa.Integer(), nullable=False),
        *_registration_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    _registration_indexes('choreographies')

    op.create_table('choreography_gymnasts',
        sa.Column('choreography_id', sa.String(length=36), nullable=False),
        sa.Column('gymnast_id', sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(['choreography_id'], ['choreographies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['gymnast_id'], ['gymnasts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('choreography_id', 'gymnast_id')
    )

    # Create coaches table
    op.create_table('coaches',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('fig_id', sa.String(length=50), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('gender', sa.String(length=10), nullable=False),
        sa.Column('level', sa.String(length=50), nullable=False),
        sa.Column('level_description', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='REGISTERED'),
        *_registration_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    _registration_indexes('coaches')
    op.create_index(op.f('ix_coaches_fig_id'), 'coaches', ['fig_id'], unique=False)

    # Create judges table
    op.create_table('judges',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('fig_id', sa.String(length=50), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('birth', sa.String(length=20), nullable=False),
        sa.Column('gender', sa.String(length=10), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('category_description', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='REGISTERED'),
        *_registration_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    _registration_indexes('judges')
    op.create_index(op.f('ix_judges_fig_id'), 'judges', ['fig_id'], unique=False)

    # Create support_staff table
    op.create_table('support_staff',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=30), nullable=False),
        sa.Column('gender', sa.String(length=10), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='REGISTERED'),
        *_registration_columns(),
        sa.PrimaryKeyConstraint('id')
    )
    _registration_indexes('support_staff')


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('support_staff')
    op.drop_table('judges')
    op.drop_table('coaches')
    op.drop_table('choreography_gymnasts')
    op.drop_table('choreographies')
    op.drop_table('gymnasts')
    op.drop_table('tournaments')
    op.drop_table('users')
