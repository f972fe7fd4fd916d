"""
Profile Password Hash

Stores a bcrypt hash on each profile so login can check a password.

Revision ID: 002
Revises: 001
Create Date: 2026-10-18 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Add the password hash column."""
    op.add_column('profiles', sa.Column('password_hash', sa.String(255), nullable=True))


def downgrade() -> None:
    """Drop the password hash column."""
    op.drop_column('profiles', 'password_hash')
