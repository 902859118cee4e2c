"""create users and password_resets

Revision ID: 3f2a9c1d7e54
Revises:
Create Date: 2026-10-19 09:14:02.118734

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e54'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum('ADMIN', 'MANAGER', 'TECHNICIAN', 'USER', name='user_role')


def upgrade() -> None:
    """Upgrade schema - accounts and OTP reset requests."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password', sa.String(), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('company', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table(
        'password_resets',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('otp', sa.String(length=6), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('verified', sa.Boolean(), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_password_resets_email', 'password_resets', ['email'])

    # At most one unused reset request per account
    op.create_index(
        'uq_password_resets_unused_user',
        'password_resets',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text('NOT used'),
        sqlite_where=sa.text('NOT used'),
    )


def downgrade() -> None:
    """Downgrade schema - drop accounts and reset requests."""
    op.drop_index('uq_password_resets_unused_user', table_name='password_resets')
    op.drop_index('ix_password_resets_email', table_name='password_resets')
    op.drop_table('password_resets')
    op.drop_table('users')
    user_role.drop(op.get_bind(), checkfirst=True)
