"""create split, distribution and payment tables

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = '3f1a9c2e7b10'
down_revision = None
branch_labels = None
depends_on = None

AMOUNT = sa.Numeric(78, 0)


def upgrade() -> None:
    op.create_table(
        'splits',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('contract_address', sa.String(42), nullable=False, unique=True),
        sa.Column('owner', sa.String(42), nullable=False),
        sa.Column('token', sa.String(42), nullable=False),
        sa.Column('token_symbol', sa.String(16), nullable=True),
        sa.Column('token_decimals', sa.Integer(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=True),
        sa.Column('auto_distribute', sa.Boolean(), nullable=True),
        sa.Column('distribution_threshold', AMOUNT, nullable=True),
        sa.Column('webhook_url', sa.String(), nullable=True),
        sa.Column('total_payments', sa.Integer(), nullable=True),
        sa.Column('total_received', AMOUNT, nullable=True),
        sa.Column('total_distributed', AMOUNT, nullable=True),
        sa.Column('created_tx', sa.String(66), nullable=True),
        sa.Column('last_payment_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_distribution_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deactivated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_splits_contract_address', 'splits', ['contract_address'])
    op.create_index('ix_splits_owner', 'splits', ['owner'])
    op.create_index('ix_splits_active', 'splits', ['active'])

    op.create_table(
        'split_recipients',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('split_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('splits.id'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('address', sa.String(42), nullable=False),
        sa.Column('name', sa.String(50), nullable=True),
        sa.Column('share_bps', sa.Integer(), nullable=False),
    )
    op.create_index('ix_split_recipients_split_id', 'split_recipients', ['split_id'])
    op.create_index('ix_split_recipients_address', 'split_recipients', ['address'])

    distribution_trigger = postgresql.ENUM('manual', 'auto', 'api', name='distributiontrigger')
    op.create_table(
        'distributions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('split_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('splits.id'), nullable=False),
        sa.Column('amount', AMOUNT, nullable=False),
        sa.Column('triggered_by', distribution_trigger, nullable=False),
        sa.Column('triggered_by_address', sa.String(42), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_distributions_split_id', 'distributions', ['split_id'])

    op.create_table(
        'distribution_payouts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('distribution_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('distributions.id'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('recipient', sa.String(42), nullable=False),
        sa.Column('amount', AMOUNT, nullable=False),
    )
    op.create_index('ix_distribution_payouts_distribution_id', 'distribution_payouts', ['distribution_id'])
    op.create_index('ix_distribution_payouts_recipient', 'distribution_payouts', ['recipient'])

    payment_status = postgresql.ENUM('pending', 'completed', 'failed', name='paymentstatus')
    op.create_table(
        'payments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('split_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('splits.id'), nullable=True),
        sa.Column('contract_address', sa.String(42), nullable=False),
        sa.Column('payer_address', sa.String(42), nullable=False),
        sa.Column('amount', AMOUNT, nullable=False),
        sa.Column('token', sa.String(42), nullable=False),
        sa.Column('tx_hash', sa.String(66), nullable=True, unique=True),
        sa.Column('memo', sa.String(200), nullable=True),
        sa.Column('payment_link_id', sa.String(64), nullable=True),
        sa.Column('batch_id', sa.String(64), nullable=True),
        sa.Column('status', payment_status, nullable=False),
        sa.Column('error', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_payments_split_id', 'payments', ['split_id'])
    op.create_index('ix_payments_contract_address', 'payments', ['contract_address'])
    op.create_index('ix_payments_payer_address', 'payments', ['payer_address'])
    op.create_index('ix_payments_created_at', 'payments', ['created_at'])

    op.create_table(
        'payment_links',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('link_id', sa.String(64), nullable=False, unique=True),
        sa.Column('split_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('splits.id'), nullable=False),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('amount', AMOUNT, nullable=True),
        sa.Column('redirect_url', sa.String(), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('max_uses', sa.Integer(), nullable=True),
        sa.Column('usage_count', sa.Integer(), nullable=True),
        sa.Column('total_amount', AMOUNT, nullable=True),
        sa.Column('active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_payment_links_split_id', 'payment_links', ['split_id'])


def downgrade() -> None:
    op.drop_table('payment_links')
    op.drop_table('payments')
    op.drop_table('distribution_payouts')
    op.drop_table('distributions')
    op.drop_table('split_recipients')
    op.drop_table('splits')
    sa.Enum(name='paymentstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='distributiontrigger').drop(op.get_bind(), checkfirst=True)
