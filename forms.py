from flask_wtf import FlaskForm
from wtforms import (
    BooleanField, DateField, DecimalField, FieldList, FormField, PasswordField,
    SelectField, StringField, SubmitField, TextAreaField,
)
from wtforms.validators import DataRequired, Email, Length, NumberRange, Optional
from flask_babel import lazy_gettext as _l

from models import (
    ACCOUNT_TYPES, CONTACT_TYPES, INVOICE_STATUSES, NORMAL_BALANCES,
    PURCHASE_ORDER_STATUSES, PURCHASE_STATUSES, SALE_STATUSES,
)


def _choices(values):
    return [(v, v) for v in values]


class LoginForm(FlaskForm):
    username = StringField(_l('Username'), validators=[DataRequired(), Length(min=3, max=150)])
    password = PasswordField(_l('Password'), validators=[DataRequired()])
    remember = BooleanField(_l('Remember Me'))
    submit = SubmitField(_l('Login'))


class LineItemForm(FlaskForm):
    class Meta:
        csrf = False  # disable CSRF for nested subform
    description = StringField(_l('Description'), validators=[Optional(), Length(max=255)])
    quantity = DecimalField(_l('Qty'), places=2, default=1, validators=[Optional(), NumberRange(min=0)])
    unit_price = DecimalField(_l('Unit Price'), places=2, default=0, validators=[Optional(), NumberRange(min=0)])


class SaleForm(FlaskForm):
    customer = StringField(_l('Customer'), validators=[DataRequired(), Length(max=200)])
    date = DateField(_l('Date'), validators=[DataRequired()])
    status = SelectField(_l('Status'), choices=_choices(SALE_STATUSES), default='Pending')
    category = StringField(_l('Category'), validators=[Optional(), Length(max=150)])
    tax_percentage = DecimalField(_l('Tax %'), places=2, validators=[Optional(), NumberRange(min=0, max=100)])
    notes = TextAreaField(_l('Notes'), validators=[Optional()])
    items = FieldList(FormField(LineItemForm), min_entries=1)
    submit = SubmitField(_l('Save'))


class PurchaseForm(FlaskForm):
    supplier = StringField(_l('Supplier'), validators=[DataRequired(), Length(max=200)])
    date = DateField(_l('Date'), validators=[DataRequired()])
    status = SelectField(_l('Status'), choices=_choices(PURCHASE_STATUSES), default='Pending')
    category = StringField(_l('Category'), validators=[Optional(), Length(max=150)])
    notes = TextAreaField(_l('Notes'), validators=[Optional()])
    items = FieldList(FormField(LineItemForm), min_entries=1)
    submit = SubmitField(_l('Save'))


class InvoiceForm(FlaskForm):
    customer = StringField(_l('Customer'), validators=[DataRequired(), Length(max=200)])
    date = DateField(_l('Date'), validators=[DataRequired()])
    due_date = DateField(_l('Due Date'), validators=[Optional()])
    status = SelectField(_l('Status'), choices=_choices(INVOICE_STATUSES), default='Pending')
    tax_percentage = DecimalField(_l('Tax %'), places=2, validators=[Optional(), NumberRange(min=0, max=100)])
    notes = TextAreaField(_l('Notes'), validators=[Optional()])
    items = FieldList(FormField(LineItemForm), min_entries=1)
    submit = SubmitField(_l('Save'))


class PurchaseOrderForm(FlaskForm):
    supplier = StringField(_l('Supplier'), validators=[DataRequired(), Length(max=200)])
    date = DateField(_l('Date'), validators=[DataRequired()])
    delivery_date = DateField(_l('Delivery Date'), validators=[Optional()])
    status = SelectField(_l('Status'), choices=_choices(PURCHASE_ORDER_STATUSES), default='Pending')
    notes = TextAreaField(_l('Notes'), validators=[Optional()])
    items = FieldList(FormField(LineItemForm), min_entries=1)
    submit = SubmitField(_l('Save'))


class JournalLineForm(FlaskForm):
    class Meta:
        csrf = False
    account = StringField(_l('Account'), validators=[Optional(), Length(max=200)])
    description = StringField(_l('Description'), validators=[Optional(), Length(max=255)])
    debit = DecimalField(_l('Debit'), places=2, validators=[Optional(), NumberRange(min=0)])
    credit = DecimalField(_l('Credit'), places=2, validators=[Optional(), NumberRange(min=0)])


class JournalEntryForm(FlaskForm):
    date = DateField(_l('Date'), validators=[DataRequired()])
    reference = StringField(_l('Reference'), validators=[Optional(), Length(max=100)])
    description = StringField(_l('Description'), validators=[DataRequired(), Length(max=500)])
    category = StringField(_l('Category'), validators=[Optional(), Length(max=150)])
    notes = TextAreaField(_l('Notes'), validators=[Optional()])
    lines = FieldList(FormField(JournalLineForm), min_entries=2)
    submit = SubmitField(_l('Save'))


class ContactForm(FlaskForm):
    name = StringField(_l('Name'), validators=[DataRequired(), Length(max=200)])
    email = StringField(_l('Email'), validators=[Optional(), Email(), Length(max=255)])
    phone = StringField(_l('Phone'), validators=[Optional(), Length(max=50)])
    type = SelectField(_l('Type'), choices=_choices(CONTACT_TYPES), default='Customer')
    balance = DecimalField(_l('Balance'), places=2, default=0, validators=[Optional()])
    submit = SubmitField(_l('Save'))


class CategoryForm(FlaskForm):
    name = StringField(_l('Name'), validators=[DataRequired(), Length(max=150)])
    description = TextAreaField(_l('Description'), validators=[Optional()])
    is_active = BooleanField(_l('Active'), default=True)
    submit = SubmitField(_l('Save'))


class ItemForm(FlaskForm):
    name = StringField(_l('Name'), validators=[DataRequired(), Length(max=200)])
    description = TextAreaField(_l('Description'), validators=[Optional()])
    category_id = SelectField(_l('Category'), choices=[], validate_choice=False)
    unit_price = DecimalField(_l('Unit Price'), places=2, default=0, validators=[Optional(), NumberRange(min=0)])
    is_active = BooleanField(_l('Active'), default=True)
    submit = SubmitField(_l('Save'))


class AccountForm(FlaskForm):
    account_code = StringField(_l('Code'), validators=[DataRequired(), Length(max=20)])
    account_name = StringField(_l('Name'), validators=[DataRequired(), Length(max=200)])
    account_type = SelectField(_l('Type'), choices=_choices(ACCOUNT_TYPES), default='Asset')
    normal_balance = SelectField(_l('Normal Balance'), choices=_choices(NORMAL_BALANCES), default='Debit')
    submit = SubmitField(_l('Save'))


class SettingsForm(FlaskForm):
    company_name = StringField(_l('Company Name'), validators=[DataRequired(), Length(max=200)])
    email = StringField(_l('Email'), validators=[Optional(), Email(), Length(max=255)])
    phone = StringField(_l('Phone'), validators=[Optional(), Length(max=50)])
    address = TextAreaField(_l('Address'), validators=[Optional(), Length(max=500)])
    currency = StringField(_l('Currency'), validators=[Optional(), Length(min=3, max=3)])
    email_notifications = BooleanField(_l('Email notifications'))
    dark_mode = BooleanField(_l('Dark mode'))
    auto_save = BooleanField(_l('Auto save'))
    submit = SubmitField(_l('Save Settings'))


class ReportRangeForm(FlaskForm):
    class Meta:
        csrf = False
    start_date = DateField(_l('From'), validators=[Optional()])
    end_date = DateField(_l('To'), validators=[Optional()])
