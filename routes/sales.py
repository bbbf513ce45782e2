# Sales blueprint: list, create, edit, delete, receipt PDF.
from __future__ import annotations

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_login import login_required

from forms import SaleForm
from models import SALE_STATUSES, Sale, get_now
from routes.common import item_rows, pdf_response, search
from services.pdf_export import sale_receipt_pdf
from services.records import RecordSaveError, delete_record, save_sale

bp = Blueprint('sales', __name__, url_prefix='/sales')


def _form_data(form: SaleForm) -> dict:
    return {
        'customer': form.customer.data.strip(),
        'date': form.date.data,
        'status': form.status.data,
        'category': (form.category.data or '').strip() or None,
        'notes': form.notes.data or None,
        'tax_percentage': form.tax_percentage.data,
    }


@bp.route('/', methods=['GET'], endpoint='list_sales')
@login_required
def list_sales():
    q = (request.args.get('q') or '').strip()
    status = (request.args.get('status') or 'all').strip()
    page = request.args.get('page', 1, type=int)

    qry = search(Sale.query, q, Sale.id, Sale.customer, Sale.category)
    if status in SALE_STATUSES:
        qry = qry.filter(Sale.status == status)
    pagination = qry.order_by(Sale.date.desc(), Sale.created_at.desc()).paginate(
        page=page, per_page=current_app.config.get('PER_PAGE', 50), error_out=False)
    return render_template('sales/list.html', pagination=pagination, sales=pagination.items,
                           q=q, status=status, statuses=SALE_STATUSES)


@bp.route('/new', methods=['GET', 'POST'], endpoint='new_sale')
@login_required
def new_sale():
    form = SaleForm()
    if request.method == 'GET':
        form.date.data = get_now().date()
        default_tax = current_app.config.get('DEFAULT_TAX_PERCENTAGE') or None
        form.tax_percentage.data = default_tax
    if form.validate_on_submit():
        try:
            sale = save_sale(_form_data(form), item_rows(form.items))
        except RecordSaveError as e:
            current_app.logger.warning('Sale not saved: %s', e)
            flash(_('Failed to create sale: %(error)s', error=str(e)), 'danger')
        else:
            flash(_('Sale %(id)s created', id=sale.id), 'success')
            return redirect(url_for('sales.list_sales'))
    elif request.method == 'POST':
        flash(_('Please correct the errors in the form'), 'danger')
    return render_template('sales/form.html', form=form, sale=None)


@bp.route('/<sale_id>/edit', methods=['GET', 'POST'], endpoint='edit_sale')
@login_required
def edit_sale(sale_id):
    sale = Sale.query.filter_by(id=sale_id).first_or_404()
    form = SaleForm(obj=sale)
    if form.validate_on_submit():
        try:
            save_sale(_form_data(form), item_rows(form.items), sale=sale)
        except RecordSaveError as e:
            current_app.logger.warning('Sale %s not updated: %s', sale_id, e)
            flash(_('Failed to update sale: %(error)s', error=str(e)), 'danger')
        else:
            flash(_('Sale %(id)s updated', id=sale.id), 'success')
            return redirect(url_for('sales.list_sales'))
    elif request.method == 'POST':
        flash(_('Please correct the errors in the form'), 'danger')
    return render_template('sales/form.html', form=form, sale=sale)


@bp.route('/<sale_id>/delete', methods=['POST'], endpoint='delete_sale')
@login_required
def delete_sale(sale_id):
    sale = Sale.query.filter_by(id=sale_id).first_or_404()
    try:
        delete_record(sale)
    except RecordSaveError:
        flash(_('Failed to delete sale'), 'danger')
    else:
        flash(_('Sale %(id)s deleted', id=sale_id), 'success')
    return redirect(url_for('sales.list_sales'))


@bp.route('/<sale_id>/pdf', methods=['GET'], endpoint='sale_pdf')
@login_required
def sale_pdf(sale_id):
    sale = Sale.query.filter_by(id=sale_id).first_or_404()
    return pdf_response(sale_receipt_pdf(sale), f'sale-{sale.id}.pdf')
