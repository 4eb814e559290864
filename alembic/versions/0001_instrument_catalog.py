"""Create instrument catalog and lookup tables

Revision ID: 0001_instrument_catalog
Revises:
Create Date: 2026-10-16

"""
from alembic import op
import sqlalchemy as sa

from catalog.db.reference_data import (
    exchange_rows,
    exchange_segment_rows,
    instrument_type_rows,
    segment_rows,
)

# revision identifiers, used by Alembic.
revision = '0001_instrument_catalog'
down_revision = None
branch_labels = None
depends_on = None


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def price():
    return sa.Numeric(precision=18, scale=4)


def upgrade() -> None:
    exchanges = op.create_table('exchanges',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    segments = op.create_table('segments',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        *timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    instrument_types = op.create_table('instrument_types',
        sa.Column('id', sa.Integer(), autoincrement=False, nullable=False),
        sa.Column('segment_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        *timestamps(),
        sa.ForeignKeyConstraint(['segment_id'], ['segments.id']),
        sa.PrimaryKeyConstraint('id', 'segment_id')
    )

    combinations = op.create_table('exchange_segment_combinations',
        sa.Column('exchange_id', sa.Integer(), nullable=False),
        sa.Column('segment_id', sa.Integer(), nullable=False),
        sa.Column('exchange_name', sa.String(length=50), nullable=False),
        sa.Column('segment_name', sa.String(length=50), nullable=False),
        *timestamps(),
        sa.ForeignKeyConstraint(['exchange_id'], ['exchanges.id']),
        sa.ForeignKeyConstraint(['segment_id'], ['segments.id']),
        sa.PrimaryKeyConstraint('exchange_id', 'segment_id')
    )

    op.create_table('instruments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('sym_ticker', sa.String(length=255), nullable=False),
        sa.Column('fy_token', sa.String(length=50), nullable=False),
        sa.Column('ex_token', sa.BigInteger(), nullable=False),
        sa.Column('ex_symbol', sa.String(length=50), nullable=False),
        sa.Column('ex_sym_name', sa.String(length=255), nullable=False),
        sa.Column('full_description', sa.String(length=255), nullable=True),
        sa.Column('short_name', sa.String(length=100), nullable=True),
        sa.Column('display_name_mobile', sa.String(length=255), nullable=True),
        sa.Column('exchange_id', sa.Integer(), nullable=False),
        sa.Column('exchange_name', sa.String(length=50), nullable=False),
        sa.Column('segment_id', sa.Integer(), nullable=False),
        sa.Column('ex_inst_type', sa.Integer(), nullable=False),
        sa.Column('ex_series', sa.String(length=20), nullable=True),
        sa.Column('currency_code', sa.String(length=10), nullable=False),
        sa.Column('under_sym', sa.String(length=50), nullable=True),
        sa.Column('under_fy_tok', sa.String(length=50), nullable=True),
        sa.Column('expiry_date', sa.BigInteger(), nullable=True),
        sa.Column('opt_type', sa.String(length=10), nullable=True),
        sa.Column('strike_price', price(), nullable=True),
        sa.Column('min_lot_size', sa.Integer(), nullable=True),
        sa.Column('tick_size', price(), nullable=True),
        sa.Column('upper_price', price(), nullable=True),
        sa.Column('lower_price', price(), nullable=True),
        sa.Column('face_value', price(), nullable=True),
        sa.Column('qty_multiplier', price(), nullable=True),
        sa.Column('qty_freeze', sa.BigInteger(), nullable=True),
        sa.Column('previous_close', price(), nullable=True),
        sa.Column('previous_oi', price(), nullable=True),
        sa.Column('is_mtf_tradable', sa.Boolean(), nullable=True),
        sa.Column('mtf_margin', price(), nullable=True),
        sa.Column('isin', sa.String(length=20), nullable=True),
        sa.Column('trading_session', sa.String(length=100), nullable=True),
        sa.Column('asm_gsm_val', sa.Text(), nullable=True),
        sa.Column('stream', sa.String(length=50), nullable=True),
        sa.Column('cautionary_msg', sa.Text(), nullable=True),
        sa.Column('product_code', sa.String(length=50), nullable=True),
        sa.Column('trade_status', sa.Boolean(), nullable=False),
        sa.Column('last_update', sa.Date(), nullable=True),
        *timestamps(),
        sa.ForeignKeyConstraint(['exchange_id'], ['exchanges.id']),
        sa.ForeignKeyConstraint(['segment_id'], ['segments.id']),
        sa.ForeignKeyConstraint(
            ['exchange_id', 'segment_id'],
            ['exchange_segment_combinations.exchange_id', 'exchange_segment_combinations.segment_id'],
            name='fk_instruments_exchange_segment',
        ),
        sa.ForeignKeyConstraint(
            ['ex_inst_type', 'segment_id'],
            ['instrument_types.id', 'instrument_types.segment_id'],
            name='fk_instruments_instrument_type',
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('fy_token')
    )
    op.create_index(op.f('ix_instruments_sym_ticker'), 'instruments', ['sym_ticker'], unique=True)
    op.create_index(op.f('ix_instruments_ex_symbol'), 'instruments', ['ex_symbol'], unique=False)
    op.create_index(op.f('ix_instruments_exchange_id'), 'instruments', ['exchange_id'], unique=False)
    op.create_index(op.f('ix_instruments_segment_id'), 'instruments', ['segment_id'], unique=False)

    # Lookup enumerations are fixed by the broker
    op.bulk_insert(exchanges, exchange_rows())
    op.bulk_insert(segments, segment_rows())
    op.bulk_insert(combinations, exchange_segment_rows())
    op.bulk_insert(instrument_types, instrument_type_rows())


def downgrade() -> None:
    op.drop_index(op.f('ix_instruments_segment_id'), table_name='instruments')
    op.drop_index(op.f('ix_instruments_exchange_id'), table_name='instruments')
    op.drop_index(op.f('ix_instruments_ex_symbol'), table_name='instruments')
    op.drop_index(op.f('ix_instruments_sym_ticker'), table_name='instruments')
    op.drop_table('instruments')
    op.drop_table('exchange_segment_combinations')
    op.drop_table('instrument_types')
    op.drop_table('segments')
    op.drop_table('exchanges')
