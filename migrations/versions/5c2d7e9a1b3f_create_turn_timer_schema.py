"""create turn timer schema

Revision ID: 5c2d7e9a1b3f
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2d7e9a1b3f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('is_gm', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)

    op.create_table(
        'campaign',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('turnorder', sa.Text(), nullable=False),
        sa.Column('player_page_id', sa.String(length=32), nullable=False),
    )

    op.create_table(
        'character',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
    )

    op.create_table(
        'graphic',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=True),
        sa.Column('page_id', sa.String(length=32), nullable=True),
        sa.Column('represents', sa.String(length=32), sa.ForeignKey('character.id'), nullable=True),
    )

    op.create_table(
        'text_object',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('page_id', sa.String(length=32), nullable=True),
        sa.Column('layer', sa.String(length=32), nullable=False),
        sa.Column('left', sa.Float(), nullable=False),
        sa.Column('top', sa.Float(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('font_size', sa.Integer(), nullable=False),
        sa.Column('font_family', sa.String(length=64), nullable=False),
        sa.Column('color', sa.String(length=16), nullable=False),
        sa.Column('controlled_by', sa.String(length=256), nullable=False),
    )

    op.create_table(
        'script_state',
        sa.Column('key', sa.String(length=64), primary_key=True),
        sa.Column('data', sa.Text(), nullable=False),
    )


def downgrade():
    op.drop_table('script_state')
    op.drop_table('text_object')
    op.drop_table('graphic')
    op.drop_table('character')
    op.drop_table('campaign')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
