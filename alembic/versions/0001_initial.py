"""initial schema: owners, expenses, receipts, photos

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18

"""
import uuid

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from backoffice.core.constants import EXPENSE_CATEGORIES

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    work_order_status = postgresql.ENUM('reported', 'assigned', 'completed', name='work_order_status')
    photo_owner_type = postgresql.ENUM('property', 'work_order', name='photo_owner_type')

    op.create_table(
        'properties',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('account_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('street', sa.String(255)),
        sa.Column('city', sa.String(100)),
        sa.Column('state', sa.String(2)),
        sa.Column('zip_code', sa.String(10)),
        *_timestamps(),
    )
    op.create_index('ix_properties_account_id', 'properties', ['account_id'])

    op.create_table(
        'work_orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('account_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('property_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', work_order_status, nullable=False, server_default='reported'),
        sa.Column('vendor_name', sa.String(255)),
        *_timestamps(),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_work_orders_account_id', 'work_orders', ['account_id'])

    categories = op.create_table(
        'expense_categories',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('schedule_e_line', sa.String(20)),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
    )
    op.bulk_insert(
        categories,
        [
            {'id': uuid.UUID(cid), 'name': name, 'schedule_e_line': line, 'sort_order': sort}
            for cid, name, line, sort in EXPENSE_CATEGORIES
        ],
    )

    op.create_table(
        'receipts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('account_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('property_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('expense_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('storage_key', sa.String(500), nullable=False),
        sa.Column('thumbnail_storage_key', sa.String(500)),
        sa.Column('original_file_name', sa.String(255)),
        sa.Column('content_type', sa.String(100)),
        sa.Column('file_size_bytes', sa.BigInteger()),
        sa.Column('created_by_user_id', postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('expense_id', name='uq_receipts_expense_id'),
    )
    op.create_index('ix_receipts_account_id_processed_at', 'receipts', ['account_id', 'processed_at'])

    op.create_table(
        'expenses',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('account_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('property_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('category_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('work_order_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('receipt_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('description', sa.String(500)),
        sa.Column('created_by_user_id', postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['category_id'], ['expense_categories.id']),
        sa.ForeignKeyConstraint(['work_order_id'], ['work_orders.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['receipt_id'], ['receipts.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('receipt_id', name='uq_expenses_receipt_id'),
    )
    op.create_index('ix_expenses_account_id', 'expenses', ['account_id'])
    op.create_index('ix_expenses_property_id', 'expenses', ['property_id'])

    # receipts <-> expenses reference each other; close the cycle afterwards
    op.create_foreign_key(
        'fk_receipts_expense_id',
        'receipts', 'expenses',
        ['expense_id'], ['id'],
        ondelete='SET NULL',
    )

    op.create_table(
        'photos',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('account_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('owner_type', photo_owner_type, nullable=False),
        sa.Column('owner_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('storage_key', sa.String(500), nullable=False),
        sa.Column('thumbnail_storage_key', sa.String(500)),
        sa.Column('original_file_name', sa.String(255)),
        sa.Column('content_type', sa.String(100), nullable=False),
        sa.Column('file_size_bytes', sa.BigInteger(), nullable=False),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_by_user_id', postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_photos_owner', 'photos', ['account_id', 'owner_type', 'owner_id'])
    op.create_index(
        'uq_photos_primary_per_owner',
        'photos',
        ['account_id', 'owner_type', 'owner_id'],
        unique=True,
        postgresql_where=sa.text('is_primary AND deleted_at IS NULL'),
    )


def downgrade() -> None:
    op.drop_index('uq_photos_primary_per_owner', table_name='photos')
    op.drop_index('ix_photos_owner', table_name='photos')
    op.drop_table('photos')

    op.drop_constraint('fk_receipts_expense_id', 'receipts', type_='foreignkey')
    op.drop_index('ix_expenses_property_id', table_name='expenses')
    op.drop_index('ix_expenses_account_id', table_name='expenses')
    op.drop_table('expenses')

    op.drop_index('ix_receipts_account_id_processed_at', table_name='receipts')
    op.drop_table('receipts')
    op.drop_table('expense_categories')

    op.drop_index('ix_work_orders_account_id', table_name='work_orders')
    op.drop_table('work_orders')

    op.drop_index('ix_properties_account_id', table_name='properties')
    op.drop_table('properties')

    sa.Enum(name='photo_owner_type').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='work_order_status').drop(op.get_bind(), checkfirst=True)
