"""Initial schema: users, settings, catalog, contacts, accounts, journal, sales,
purchases, invoices and purchase orders

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True)]


def _line_item_columns(parent_col, parent_table):
    return [
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column(parent_col, sa.String(length=20), nullable=False),
        sa.Column('line_no', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Numeric(12, 2), nullable=False),
        sa.Column('unit_price', sa.Numeric(14, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint([parent_col], [f'{parent_table}.id']),
        sa.PrimaryKeyConstraint('id'),
    ]


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=150), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=True),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('email'),
    )
    op.create_table('settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('company_name', sa.String(length=200), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('currency', sa.String(length=10), nullable=True),
        sa.Column('email_notifications', sa.Boolean(), nullable=True),
        sa.Column('dark_mode', sa.Boolean(), nullable=True),
        sa.Column('auto_save', sa.Boolean(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table('categories',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_table('items',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category_id', sa.String(length=20), nullable=True),
        sa.Column('unit_price', sa.Numeric(14, 2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table('contacts',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('balance', sa.Numeric(14, 2), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table('chart_of_accounts',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('account_code', sa.String(length=20), nullable=False),
        sa.Column('account_name', sa.String(length=200), nullable=False),
        sa.Column('account_type', sa.String(length=30), nullable=False),
        sa.Column('normal_balance', sa.String(length=10), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('account_code'),
        sa.UniqueConstraint('account_name'),
    )
    op.create_table('journal_entries',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('reference', sa.String(length=100), nullable=True),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('category', sa.String(length=150), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('total_debit', sa.Numeric(14, 2), nullable=False),
        sa.Column('total_credit', sa.Numeric(14, 2), nullable=False),
        sa.Column('source_type', sa.String(length=20), nullable=True),
        sa.Column('source_id', sa.String(length=20), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_journal_entries_date', 'journal_entries', ['date'])
    op.create_table('journal_line_items',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('journal_entry_id', sa.String(length=20), nullable=False),
        sa.Column('line_no', sa.Integer(), nullable=False),
        sa.Column('account', sa.String(length=200), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('debit', sa.Numeric(14, 2), nullable=False),
        sa.Column('credit', sa.Numeric(14, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['journal_entry_id'], ['journal_entries.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table('sales',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('customer', sa.String(length=200), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('category', sa.String(length=150), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tax_percentage', sa.Numeric(6, 2), nullable=True),
        sa.Column('tax_amount', sa.Numeric(14, 2), nullable=True),
        sa.Column('journal_entry_id', sa.String(length=20), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['journal_entry_id'], ['journal_entries.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sales_date', 'sales', ['date'])
    op.create_table('sale_items', *_line_item_columns('sale_id', 'sales'))
    op.create_table('purchases',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('supplier', sa.String(length=200), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('category', sa.String(length=150), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('journal_entry_id', sa.String(length=20), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['journal_entry_id'], ['journal_entries.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_purchases_date', 'purchases', ['date'])
    op.create_table('purchase_items', *_line_item_columns('purchase_id', 'purchases'))
    op.create_table('invoices',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('customer', sa.String(length=200), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tax_percentage', sa.Numeric(6, 2), nullable=True),
        sa.Column('tax_amount', sa.Numeric(14, 2), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table('invoice_items', *_line_item_columns('invoice_id', 'invoices'))
    op.create_table('purchase_orders',
        sa.Column('id', sa.String(length=20), nullable=False),
        sa.Column('supplier', sa.String(length=200), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('delivery_date', sa.Date(), nullable=True),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table('purchase_order_items', *_line_item_columns('purchase_order_id', 'purchase_orders'))


def downgrade():
    for table in ('purchase_order_items', 'purchase_orders', 'invoice_items', 'invoices',
                  'purchase_items', 'purchases', 'sale_items', 'sales', 'journal_line_items',
                  'journal_entries', 'chart_of_accounts', 'contacts', 'items', 'categories',
                  'settings', 'users'):
        op.drop_table(table)
