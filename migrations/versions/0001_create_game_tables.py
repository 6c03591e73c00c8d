"""Create accounts, properties and check_ins tables

Revision ID: 0001_create_game_tables
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_create_game_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

mine_type = sa.Enum('rock', 'coal', 'gold', 'diamond', name='mine_type')


def upgrade() -> None:
    op.create_table(
        'accounts',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('nickname', sa.String(50), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('tb_balance', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('total_check_ins', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('total_tb_earned', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('earnings_total', sa.Double(), nullable=False, server_default=sa.text('0')),
        sa.Column('last_earnings_update', sa.DateTime(timezone=True), nullable=False),
        sa.Column('free_boosts_remaining', sa.Integer(), nullable=False, server_default=sa.text('4')),
        sa.Column('boost_started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('boost_end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('next_free_boost_reset', sa.DateTime(timezone=True), nullable=True),
        sa.Column('paid_boosts_used', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('paid_boosts_day', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'properties',
        sa.Column('id', sa.String(50), primary_key=True),
        sa.Column('grid_x', sa.Integer(), nullable=False),
        sa.Column('grid_y', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.String(128), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('mine_type', mine_type, nullable=False),
        sa.Column('center_lat', sa.Double(), nullable=False),
        sa.Column('center_lng', sa.Double(), nullable=False),
        sa.Column('nickname', sa.String(50), nullable=True),
        sa.Column('purchased_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_properties_owner_id', 'properties', ['owner_id'])

    op.create_table(
        'check_ins',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('visitor_id', sa.String(128), sa.ForeignKey('accounts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('visitor_name', sa.String(100), nullable=True),
        sa.Column('property_id', sa.String(50), sa.ForeignKey('properties.id', ondelete='CASCADE'), nullable=False),
        sa.Column('property_owner_id', sa.String(128), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('photo_url', sa.String(500), nullable=True),
        sa.Column('tb_earned', sa.Integer(), nullable=False),
        sa.Column('reference_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            'visitor_id', 'property_id', 'reference_date',
            name='uq_check_ins_visitor_property_day',
        ),
    )
    op.create_index('ix_check_ins_visitor_id', 'check_ins', ['visitor_id'])
    op.create_index('ix_check_ins_property_id', 'check_ins', ['property_id'])


def downgrade() -> None:
    op.drop_index('ix_check_ins_property_id', table_name='check_ins')
    op.drop_index('ix_check_ins_visitor_id', table_name='check_ins')
    op.drop_table('check_ins')
    op.drop_index('ix_properties_owner_id', table_name='properties')
    op.drop_table('properties')
    op.drop_table('accounts')
    mine_type.drop(op.get_bind(), checkfirst=True)
