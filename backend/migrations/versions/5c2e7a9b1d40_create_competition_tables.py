"""create house, category, player, event and placement_default tables

Revision ID: 5c2e7a9b1d40
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2e7a9b1d40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'house' not in existing_tables:
        op.create_table(
            'house',
            sa.Column('id', sa.String(length=32), primary_key=True),
            sa.Column('name', sa.String(length=64), nullable=False, unique=True),
            sa.Column('color_hex', sa.String(length=7), nullable=False),
        )

    if 'category' not in existing_tables:
        op.create_table(
            'category',
            sa.Column('id', sa.String(length=32), primary_key=True),
            sa.Column('name', sa.String(length=64), nullable=False, unique=True),
            sa.Column('label', sa.String(length=128), nullable=False),
        )

    if 'player' not in existing_tables:
        op.create_table(
            'player',
            sa.Column('id', sa.String(length=32), primary_key=True),
            sa.Column('full_name', sa.String(length=128), nullable=False),
            sa.Column('category_id', sa.String(length=32), nullable=False),
            sa.Column('house_id', sa.String(length=32), nullable=False),
        )
        op.create_index('ix_player_category_id', 'player', ['category_id'])
        op.create_index('ix_player_house_id', 'player', ['house_id'])

    if 'event' not in existing_tables:
        op.create_table(
            'event',
            sa.Column('id', sa.String(length=32), primary_key=True),
            sa.Column('name', sa.String(length=128), nullable=False),
            sa.Column('category_id', sa.String(length=32), nullable=False),
            sa.Column('type', sa.String(length=16), nullable=False),
            sa.Column('status', sa.String(length=16), nullable=False, server_default='scheduled'),
            sa.Column('scoring', sa.JSON(), nullable=False),
            sa.Column('start_time', sa.DateTime(timezone=True), nullable=True),
            sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
            sa.Column('results', sa.JSON(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_event_category_id', 'event', ['category_id'])
        op.create_index('ix_event_status', 'event', ['status'])

    if 'placement_default' not in existing_tables:
        op.create_table(
            'placement_default',
            sa.Column('id', sa.String(length=128), primary_key=True),
            sa.Column('category_id', sa.String(length=32), nullable=False),
            sa.Column('event_type', sa.String(length=16), nullable=False),
            sa.Column('placements', sa.JSON(), nullable=False),
        )
        op.create_index('ix_placement_default_category_id', 'placement_default', ['category_id'])


def downgrade():
    op.drop_table('placement_default')
    op.drop_table('event')
    op.drop_table('player')
    op.drop_table('category')
    op.drop_table('house')
    op.drop_table('user')
