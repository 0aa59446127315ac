"""create blob table for the leaderboard record

Revision ID: 3a7c9e1b2d40
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3a7c9e1b2d40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)

    # Tables created by `flask leaderboard-reset` already have the right shape
    if 'blob' in set(insp.get_table_names()):
        return

    op.create_table(
        'blob',
        sa.Column('key', sa.String(length=64), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('revision', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('updated_at', sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint('key'),
    )


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'blob' in set(insp.get_table_names()):
        op.drop_table('blob')
