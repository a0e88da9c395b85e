"""create accounts and session_tokens

Revision ID: 0001createaccounts
Revises:
Create Date: 2025-07-01 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001createaccounts'
down_revision = None
branch_labels = None
depends_on = None

role_enum = sa.Enum('admin', 'teacher', 'user', name='role')
gender_enum = sa.Enum('male', 'female', 'other', name='gender')


def upgrade() -> None:
    op.create_table(
        'accounts',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('role', role_enum, nullable=False, server_default='user'),
        sa.Column('is_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('gender', gender_enum, nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('grade_level', sa.Integer(), nullable=True),
        sa.Column('avatar_url', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    )
    op.create_index('ix_accounts_username', 'accounts', ['username'], unique=True)
    op.create_index('ix_accounts_email', 'accounts', ['email'], unique=True)

    op.create_table(
        'session_tokens',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'account_id',
            sa.String(length=36),
            sa.ForeignKey('accounts.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('token', sa.Text(), nullable=False),
    )
    op.create_index('ix_session_tokens_account_id', 'session_tokens', ['account_id'], unique=True)


def downgrade() -> None:
    op.drop_index('ix_session_tokens_account_id', table_name='session_tokens')
    op.drop_table('session_tokens')
    op.drop_index('ix_accounts_email', table_name='accounts')
    op.drop_index('ix_accounts_username', table_name='accounts')
    op.drop_table('accounts')
    gender_enum.drop(op.get_bind(), checkfirst=True)
    role_enum.drop(op.get_bind(), checkfirst=True)
