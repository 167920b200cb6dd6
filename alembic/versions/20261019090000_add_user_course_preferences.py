"""add course history, favorites and calendar notes to users

Revision ID: 20261019090000
Revises: 20261001120000
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019090000'
down_revision: Union[str, Sequence[str], None] = '20261001120000'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add JSON columns for recently opened courses, favourites and dated notes."""
    op.add_column('users', sa.Column('course_history', sa.JSON(), nullable=True))
    op.add_column('users', sa.Column('favorites', sa.JSON(), nullable=True))
    op.add_column('users', sa.Column('calendar_notes', sa.JSON(), nullable=True))


def downgrade() -> None:
    """Remove the preference columns from users."""
    with op.batch_alter_table('users') as batch_op:
        batch_op.drop_column('calendar_notes')
        batch_op.drop_column('favorites')
        batch_op.drop_column('course_history')
