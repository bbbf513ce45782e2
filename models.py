import secrets
import string
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from flask_login import UserMixin
from extensions import db, bcrypt

SALE_STATUSES = ('Paid', 'Pending', 'Overdue')
PURCHASE_STATUSES = ('Received', 'Pending', 'Cancelled')
INVOICE_STATUSES = ('Paid', 'Pending', 'Overdue')
PURCHASE_ORDER_STATUSES = ('Fulfilled', 'Pending', 'Cancelled')
CONTACT_TYPES = ('Customer', 'Supplier')
ACCOUNT_TYPES = ('Asset', 'Liability', 'Equity', 'Revenue', 'Expense')
NORMAL_BALANCES = ('Debit', 'Credit')

_ID_ALPHABET = string.digits + string.ascii_uppercase
CENT = Decimal('0.01')
# Numeric(14, 2) columns hold at most 12 integer digits
MAX_AMOUNT = Decimal('1e12')


def get_now():
    """Naive UTC timestamp, matching what SQLite and PostgreSQL hand back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_decimal(value, default='0') -> Decimal:
    """Lenient amount parsing: blanks, garbage and NaN/Infinity become ``default``."""
    if value is None or value == '':
        return Decimal(default)
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value).replace(',', '').strip())
        except (InvalidOperation, ValueError):
            return Decimal(default)
    return d if d.is_finite() else Decimal(default)


def parse_amount(value) -> Decimal:
    """Strict amount parsing for JSON payloads; blank is zero, anything else must be a finite number."""
    if value is None or value == '':
        return Decimal('0')
    if isinstance(value, bool):
        raise ValueError(f'Not an amount: {value!r}')
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value).replace(',', '').strip())
    except InvalidOperation:
        raise ValueError(f'Not an amount: {value!r}') from None
    if not d.is_finite() or abs(d) >= MAX_AMOUNT:
        raise ValueError(f'Not a finite amount: {value!r}')
    return d


def quantize(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def generate_id(prefix: str, model=None, length: int = 7, taken=None) -> str:
    """Prefixed record id, e.g. ``INV-4K2Q9ZA``.

    When ``model`` is given the id is checked against that table and
    regenerated on collision. ``taken`` holds ids already handed out in the
    current batch (pending rows are not visible to the session lookup).
    """
    for _ in range(20):
        candidate = f"{prefix}-{''.join(secrets.choice(_ID_ALPHABET) for _ in range(length))}"
        if taken is not None and candidate in taken:
            continue
        if model is not None and db.session.get(model, candidate) is not None:
            continue
        if taken is not None:
            taken.add(candidate)
        return candidate
    raise RuntimeError(f'Could not generate a unique {prefix} id')


class TimestampMixin:
    created_at = db.Column(db.DateTime, default=get_now)
    updated_at = db.Column(db.DateTime, default=get_now, onupdate=get_now)


class LineItemMixin:
    line_no = db.Column(db.Integer, nullable=False, default=1)
    description = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Numeric(12, 2), nullable=False, default=1)
    unit_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=get_now)

    @property
    def amount(self) -> Decimal:
        return quantize(to_decimal(self.quantity) * to_decimal(self.unit_price))


class User(db.Model, UserMixin):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(150), unique=True, nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)
    active = db.Column(db.Boolean, default=True)
    last_login_at = db.Column(db.DateTime, nullable=True)

    @property
    def is_active(self):
        return bool(self.active)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.username}>'


class Settings(db.Model):
    """Single-row company profile and preferences."""
    __tablename__ = 'settings'
    id = db.Column(db.Integer, primary_key=True)
    company_name = db.Column(db.String(200), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    address = db.Column(db.String(500), nullable=True)
    currency = db.Column(db.String(10), nullable=True)
    email_notifications = db.Column(db.Boolean, default=True)
    dark_mode = db.Column(db.Boolean, default=False)
    auto_save = db.Column(db.Boolean, default=True)
    updated_at = db.Column(db.DateTime, default=get_now, onupdate=get_now)

    @classmethod
    def current(cls):
        return cls.query.order_by(cls.id.asc()).first()


class Category(db.Model, TimestampMixin):
    __tablename__ = 'categories'
    id = db.Column(db.String(20), primary_key=True)
    name = db.Column(db.String(150), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, default=True)

    items = db.relationship('Item', backref='category', lazy=True)

    def __repr__(self):
        return f'<Category {self.name}>'


class Item(db.Model, TimestampMixin):
    __tablename__ = 'items'
    id = db.Column(db.String(20), primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category_id = db.Column(db.String(20), db.ForeignKey('categories.id'), nullable=True)
    unit_price = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    is_active = db.Column(db.Boolean, default=True)

    def __repr__(self):
        return f'<Item {self.name}>'


class Contact(db.Model, TimestampMixin):
    __tablename__ = 'contacts'
    id = db.Column(db.String(20), primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    type = db.Column(db.String(20), nullable=False, default='Customer')  # Customer, Supplier
    balance = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    def __repr__(self):
        return f'<Contact {self.name} ({self.type})>'


# Chart of accounts used by journal line suggestions and automatic posting
class Account(db.Model):
    __tablename__ = 'chart_of_accounts'
    id = db.Column(db.String(20), primary_key=True)
    account_code = db.Column(db.String(20), unique=True, nullable=False)
    account_name = db.Column(db.String(200), unique=True, nullable=False)
    account_type = db.Column(db.String(30), nullable=False)  # Asset, Liability, Equity, Revenue, Expense
    normal_balance = db.Column(db.String(10), nullable=False)  # Debit, Credit
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=get_now)

    def __repr__(self):
        return f'<Account {self.account_code} {self.account_name}>'


class JournalEntry(db.Model, TimestampMixin):
    __tablename__ = 'journal_entries'
    id = db.Column(db.String(20), primary_key=True)
    date = db.Column(db.Date, nullable=False, index=True)
    reference = db.Column(db.String(100), nullable=True)
    description = db.Column(db.String(500), nullable=False)
    category = db.Column(db.String(150), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    total_debit = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    total_credit = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    source_type = db.Column(db.String(20), nullable=True)  # sale, purchase
    source_id = db.Column(db.String(20), nullable=True)

    lines = db.relationship(
        'JournalLineItem', backref='journal_entry', lazy=True,
        cascade='all, delete-orphan', order_by='JournalLineItem.line_no',
    )

    @property
    def is_balanced(self) -> bool:
        return abs(to_decimal(self.total_debit) - to_decimal(self.total_credit)) < CENT

    def __repr__(self):
        return f'<JournalEntry {self.id} d={self.total_debit} c={self.total_credit}>'


class JournalLineItem(db.Model):
    __tablename__ = 'journal_line_items'
    id = db.Column(db.String(20), primary_key=True)
    journal_entry_id = db.Column(db.String(20), db.ForeignKey('journal_entries.id'), nullable=False)
    line_no = db.Column(db.Integer, nullable=False, default=1)
    account = db.Column(db.String(200), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    debit = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    credit = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=get_now)

    def __repr__(self):
        return f'<JournalLineItem {self.account} d={self.debit} c={self.credit}>'


class Sale(db.Model, TimestampMixin):
    __tablename__ = 'sales'
    id = db.Column(db.String(20), primary_key=True)
    customer = db.Column(db.String(200), nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default='Pending')  # Paid, Pending, Overdue
    category = db.Column(db.String(150), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    tax_percentage = db.Column(db.Numeric(6, 2), nullable=True)
    tax_amount = db.Column(db.Numeric(14, 2), nullable=True)
    journal_entry_id = db.Column(db.String(20), db.ForeignKey('journal_entries.id'), nullable=True)

    items = db.relationship('SaleItem', backref='sale', lazy=True,
                            cascade='all, delete-orphan', order_by='SaleItem.line_no')
    journal_entry = db.relationship('JournalEntry', foreign_keys=[journal_entry_id])

    def __repr__(self):
        return f'<Sale {self.id} {self.customer}>'


class SaleItem(db.Model, LineItemMixin):
    __tablename__ = 'sale_items'
    id = db.Column(db.String(20), primary_key=True)
    sale_id = db.Column(db.String(20), db.ForeignKey('sales.id'), nullable=False)


class Purchase(db.Model, TimestampMixin):
    __tablename__ = 'purchases'
    id = db.Column(db.String(20), primary_key=True)
    supplier = db.Column(db.String(200), nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default='Pending')  # Received, Pending, Cancelled
    category = db.Column(db.String(150), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    journal_entry_id = db.Column(db.String(20), db.ForeignKey('journal_entries.id'), nullable=True)

    items = db.relationship('PurchaseItem', backref='purchase', lazy=True,
                            cascade='all, delete-orphan', order_by='PurchaseItem.line_no')
    journal_entry = db.relationship('JournalEntry', foreign_keys=[journal_entry_id])

    def __repr__(self):
        return f'<Purchase {self.id} {self.supplier}>'


class PurchaseItem(db.Model, LineItemMixin):
    __tablename__ = 'purchase_items'
    id = db.Column(db.String(20), primary_key=True)
    purchase_id = db.Column(db.String(20), db.ForeignKey('purchases.id'), nullable=False)


class Invoice(db.Model, TimestampMixin):
    __tablename__ = 'invoices'
    id = db.Column(db.String(20), primary_key=True)
    customer = db.Column(db.String(200), nullable=False)
    date = db.Column(db.Date, nullable=False)
    due_date = db.Column(db.Date, nullable=True)
    amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default='Pending')  # Paid, Pending, Overdue
    notes = db.Column(db.Text, nullable=True)
    tax_percentage = db.Column(db.Numeric(6, 2), nullable=True)
    tax_amount = db.Column(db.Numeric(14, 2), nullable=True)

    items = db.relationship('InvoiceItem', backref='invoice', lazy=True,
                            cascade='all, delete-orphan', order_by='InvoiceItem.line_no')

    def __repr__(self):
        return f'<Invoice {self.id} {self.customer}>'


class InvoiceItem(db.Model, LineItemMixin):
    __tablename__ = 'invoice_items'
    id = db.Column(db.String(20), primary_key=True)
    invoice_id = db.Column(db.String(20), db.ForeignKey('invoices.id'), nullable=False)


class PurchaseOrder(db.Model, TimestampMixin):
    __tablename__ = 'purchase_orders'
    id = db.Column(db.String(20), primary_key=True)
    supplier = db.Column(db.String(200), nullable=False)
    date = db.Column(db.Date, nullable=False)
    delivery_date = db.Column(db.Date, nullable=True)
    amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    status = db.Column(db.String(20), nullable=False, default='Pending')  # Fulfilled, Pending, Cancelled
    notes = db.Column(db.Text, nullable=True)

    items = db.relationship('PurchaseOrderItem', backref='purchase_order', lazy=True,
                            cascade='all, delete-orphan', order_by='PurchaseOrderItem.line_no')

    def __repr__(self):
        return f'<PurchaseOrder {self.id} {self.supplier}>'


class PurchaseOrderItem(db.Model, LineItemMixin):
    __tablename__ = 'purchase_order_items'
    id = db.Column(db.String(20), primary_key=True)
    purchase_order_id = db.Column(db.String(20), db.ForeignKey('purchase_orders.id'), nullable=False)
