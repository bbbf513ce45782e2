# Invoices blueprint: list, create, edit, delete, invoice PDF.
from __future__ import annotations

from datetime import timedelta

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_login import login_required

from forms import InvoiceForm
from models import INVOICE_STATUSES, Invoice, get_now
from routes.common import item_rows, pdf_response, search
from services.pdf_export import invoice_pdf as render_invoice_pdf
from services.records import RecordSaveError, delete_record, save_invoice

bp = Blueprint('invoices', __name__, url_prefix='/invoices')


def _form_data(form: InvoiceForm) -> dict:
    due = form.due_date.data
    if due is None:
        due = form.date.data + timedelta(days=current_app.config.get('INVOICE_DUE_DAYS', 15))
    return {
        'customer': form.customer.data.strip(),
        'date': form.date.data,
        'due_date': due,
        'status': form.status.data,
        'notes': form.notes.data or None,
        'tax_percentage': form.tax_percentage.data,
    }


@bp.route('/', methods=['GET'], endpoint='list_invoices')
@login_required
def list_invoices():
    q = (request.args.get('q') or '').strip()
    status = (request.args.get('status') or 'all').strip()
    page = request.args.get('page', 1, type=int)

    qry = search(Invoice.query, q, Invoice.id, Invoice.customer)
    if status in INVOICE_STATUSES:
        qry = qry.filter(Invoice.status == status)
    pagination = qry.order_by(Invoice.date.desc(), Invoice.created_at.desc()).paginate(
        page=page, per_page=current_app.config.get('PER_PAGE', 50), error_out=False)
    return render_template('invoices/list.html', pagination=pagination, invoices=pagination.items,
                           q=q, status=status, statuses=INVOICE_STATUSES)


@bp.route('/new', methods=['GET', 'POST'], endpoint='new_invoice')
@login_required
def new_invoice():
    form = InvoiceForm()
    if request.method == 'GET':
        today = get_now().date()
        form.date.data = today
        form.due_date.data = today + timedelta(days=current_app.config.get('INVOICE_DUE_DAYS', 15))
        form.tax_percentage.data = current_app.config.get('DEFAULT_TAX_PERCENTAGE') or None
    if form.validate_on_submit():
        try:
            invoice = save_invoice(_form_data(form), item_rows(form.items))
        except RecordSaveError as e:
            current_app.logger.warning('Invoice not saved: %s', e)
            flash(_('Failed to create invoice: %(error)s', error=str(e)), 'danger')
        else:
            flash(_('Invoice %(id)s created', id=invoice.id), 'success')
            return redirect(url_for('invoices.list_invoices'))
    elif request.method == 'POST':
        flash(_('Please correct the errors in the form'), 'danger')
    return render_template('invoices/form.html', form=form, invoice=None)


@bp.route('/<invoice_id>/edit', methods=['GET', 'POST'], endpoint='edit_invoice')
@login_required
def edit_invoice(invoice_id):
    invoice = Invoice.query.filter_by(id=invoice_id).first_or_404()
    form = InvoiceForm(obj=invoice)
    if form.validate_on_submit():
        try:
            save_invoice(_form_data(form), item_rows(form.items), invoice=invoice)
        except RecordSaveError as e:
            current_app.logger.warning('Invoice %s not updated: %s', invoice_id, e)
            flash(_('Failed to update invoice: %(error)s', error=str(e)), 'danger')
        else:
            flash(_('Invoice %(id)s updated', id=invoice.id), 'success')
            return redirect(url_for('invoices.list_invoices'))
    elif request.method == 'POST':
        flash(_('Please correct the errors in the form'), 'danger')
    return render_template('invoices/form.html', form=form, invoice=invoice)


@bp.route('/<invoice_id>/delete', methods=['POST'], endpoint='delete_invoice')
@login_required
def delete_invoice(invoice_id):
    invoice = Invoice.query.filter_by(id=invoice_id).first_or_404()
    try:
        delete_record(invoice)
    except RecordSaveError:
        flash(_('Failed to delete invoice'), 'danger')
    else:
        flash(_('Invoice %(id)s deleted', id=invoice_id), 'success')
    return redirect(url_for('invoices.list_invoices'))


@bp.route('/<invoice_id>/pdf', methods=['GET'], endpoint='invoice_pdf')
@login_required
def invoice_pdf(invoice_id):
    invoice = Invoice.query.filter_by(id=invoice_id).first_or_404()
    return pdf_response(render_invoice_pdf(invoice), f'invoice-{invoice.id}.pdf')
