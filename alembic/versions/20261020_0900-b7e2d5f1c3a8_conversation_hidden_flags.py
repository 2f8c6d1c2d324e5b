"""conversation_hidden_flags

Revision ID: b7e2d5f1c3a8
Revises: a1c4e7d2b9f0
Create Date: 2026-10-20 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'b7e2d5f1c3a8'
down_revision: Union[str, None] = 'a1c4e7d2b9f0'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Split list visibility from the deletion timestamp on conversations.

    Existing deletions stay hidden. Also drops idx_users_username, which
    duplicated the index behind the username unique constraint.
    """
    op.add_column('conversations', sa.Column('user1_hidden', sa.Boolean(), server_default=sa.false(), nullable=False))
    op.add_column('conversations', sa.Column('user2_hidden', sa.Boolean(), server_default=sa.false(), nullable=False))

    op.execute("UPDATE conversations SET user1_hidden = true WHERE user1_deleted_at IS NOT NULL")
    op.execute("UPDATE conversations SET user2_hidden = true WHERE user2_deleted_at IS NOT NULL")

    op.drop_index('idx_users_username', table_name='users')


def downgrade() -> None:
    op.create_index('idx_users_username', 'users', ['username'], unique=False)
    op.drop_column('conversations', 'user2_hidden')
    op.drop_column('conversations', 'user1_hidden')
