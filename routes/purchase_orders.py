# Purchase orders blueprint: list, create, edit, delete, purchase order PDF.
from __future__ import annotations

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_login import login_required

from forms import PurchaseOrderForm
from models import PURCHASE_ORDER_STATUSES, PurchaseOrder, get_now
from routes.common import item_rows, pdf_response, search
from services.pdf_export import purchase_order_pdf as render_purchase_order_pdf
from services.records import RecordSaveError, delete_record, save_purchase_order

bp = Blueprint('purchase_orders', __name__, url_prefix='/purchase-orders')


def _form_data(form: PurchaseOrderForm) -> dict:
    return {
        'supplier': form.supplier.data.strip(),
        'date': form.date.data,
        'delivery_date': form.delivery_date.data,
        'status': form.status.data,
        'notes': form.notes.data or None,
    }


@bp.route('/', methods=['GET'], endpoint='list_orders')
@login_required
def list_orders():
    q = (request.args.get('q') or '').strip()
    status = (request.args.get('status') or 'all').strip()
    page = request.args.get('page', 1, type=int)

    qry = search(PurchaseOrder.query, q, PurchaseOrder.id, PurchaseOrder.supplier)
    if status in PURCHASE_ORDER_STATUSES:
        qry = qry.filter(PurchaseOrder.status == status)
    pagination = qry.order_by(PurchaseOrder.date.desc(), PurchaseOrder.created_at.desc()).paginate(
        page=page, per_page=current_app.config.get('PER_PAGE', 50), error_out=False)
    return render_template('purchase_orders/list.html', pagination=pagination, orders=pagination.items,
                           q=q, status=status, statuses=PURCHASE_ORDER_STATUSES)


@bp.route('/new', methods=['GET', 'POST'], endpoint='new_order')
@login_required
def new_order():
    form = PurchaseOrderForm()
    if request.method == 'GET':
        form.date.data = get_now().date()
    if form.validate_on_submit():
        try:
            order = save_purchase_order(_form_data(form), item_rows(form.items))
        except RecordSaveError as e:
            current_app.logger.warning('Purchase order not saved: %s', e)
            flash(_('Failed to create purchase order: %(error)s', error=str(e)), 'danger')
        else:
            flash(_('Purchase order %(id)s created', id=order.id), 'success')
            return redirect(url_for('purchase_orders.list_orders'))
    elif request.method == 'POST':
        flash(_('Please correct the errors in the form'), 'danger')
    return render_template('purchase_orders/form.html', form=form, order=None)


@bp.route('/<order_id>/edit', methods=['GET', 'POST'], endpoint='edit_order')
@login_required
def edit_order(order_id):
    order = PurchaseOrder.query.filter_by(id=order_id).first_or_404()
    form = PurchaseOrderForm(obj=order)
    if form.validate_on_submit():
        try:
            save_purchase_order(_form_data(form), item_rows(form.items), order=order)
        except RecordSaveError as e:
            current_app.logger.warning('Purchase order %s not updated: %s', order_id, e)
            flash(_('Failed to update purchase order: %(error)s', error=str(e)), 'danger')
        else:
            flash(_('Purchase order %(id)s updated', id=order.id), 'success')
            return redirect(url_for('purchase_orders.list_orders'))
    elif request.method == 'POST':
        flash(_('Please correct the errors in the form'), 'danger')
    return render_template('purchase_orders/form.html', form=form, order=order)


@bp.route('/<order_id>/delete', methods=['POST'], endpoint='delete_order')
@login_required
def delete_order(order_id):
    order = PurchaseOrder.query.filter_by(id=order_id).first_or_404()
    try:
        delete_record(order)
    except RecordSaveError:
        flash(_('Failed to delete purchase order'), 'danger')
    else:
        flash(_('Purchase order %(id)s deleted', id=order_id), 'success')
    return redirect(url_for('purchase_orders.list_orders'))


@bp.route('/<order_id>/pdf', methods=['GET'], endpoint='order_pdf')
@login_required
def order_pdf(order_id):
    order = PurchaseOrder.query.filter_by(id=order_id).first_or_404()
    return pdf_response(render_purchase_order_pdf(order), f'purchase-order-{order.id}.pdf')
