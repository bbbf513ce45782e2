# Purchases blueprint: list, create, edit, delete, purchase record PDF.
from __future__ import annotations

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_login import login_required

from forms import PurchaseForm
from models import PURCHASE_STATUSES, Purchase, get_now
from routes.common import item_rows, pdf_response, search
from services.pdf_export import purchase_pdf as render_purchase_pdf
from services.records import RecordSaveError, delete_record, save_purchase

bp = Blueprint('purchases', __name__, url_prefix='/purchases')


def _form_data(form: PurchaseForm) -> dict:
    return {
        'supplier': form.supplier.data.strip(),
        'date': form.date.data,
        'status': form.status.data,
        'category': (form.category.data or '').strip() or None,
        'notes': form.notes.data or None,
    }


@bp.route('/', methods=['GET'], endpoint='list_purchases')
@login_required
def list_purchases():
    q = (request.args.get('q') or '').strip()
    status = (request.args.get('status') or 'all').strip()
    page = request.args.get('page', 1, type=int)

    qry = search(Purchase.query, q, Purchase.id, Purchase.supplier, Purchase.category)
    if status in PURCHASE_STATUSES:
        qry = qry.filter(Purchase.status == status)
    pagination = qry.order_by(Purchase.date.desc(), Purchase.created_at.desc()).paginate(
        page=page, per_page=current_app.config.get('PER_PAGE', 50), error_out=False)
    return render_template('purchases/list.html', pagination=pagination, purchases=pagination.items,
                           q=q, status=status, statuses=PURCHASE_STATUSES)


@bp.route('/new', methods=['GET', 'POST'], endpoint='new_purchase')
@login_required
def new_purchase():
    form = PurchaseForm()
    if request.method == 'GET':
        form.date.data = get_now().date()
    if form.validate_on_submit():
        try:
            purchase = save_purchase(_form_data(form), item_rows(form.items))
        except RecordSaveError as e:
            current_app.logger.warning('Purchase not saved: %s', e)
            flash(_('Failed to create purchase: %(error)s', error=str(e)), 'danger')
        else:
            flash(_('Purchase %(id)s created', id=purchase.id), 'success')
            return redirect(url_for('purchases.list_purchases'))
    elif request.method == 'POST':
        flash(_('Please correct the errors in the form'), 'danger')
    return render_template('purchases/form.html', form=form, purchase=None)


@bp.route('/<purchase_id>/edit', methods=['GET', 'POST'], endpoint='edit_purchase')
@login_required
def edit_purchase(purchase_id):
    purchase = Purchase.query.filter_by(id=purchase_id).first_or_404()
    form = PurchaseForm(obj=purchase)
    if form.validate_on_submit():
        try:
            save_purchase(_form_data(form), item_rows(form.items), purchase=purchase)
        except RecordSaveError as e:
            current_app.logger.warning('Purchase %s not updated: %s', purchase_id, e)
            flash(_('Failed to update purchase: %(error)s', error=str(e)), 'danger')
        else:
            flash(_('Purchase %(id)s updated', id=purchase.id), 'success')
            return redirect(url_for('purchases.list_purchases'))
    elif request.method == 'POST':
        flash(_('Please correct the errors in the form'), 'danger')
    return render_template('purchases/form.html', form=form, purchase=purchase)


@bp.route('/<purchase_id>/delete', methods=['POST'], endpoint='delete_purchase')
@login_required
def delete_purchase(purchase_id):
    purchase = Purchase.query.filter_by(id=purchase_id).first_or_404()
    try:
        delete_record(purchase)
    except RecordSaveError:
        flash(_('Failed to delete purchase'), 'danger')
    else:
        flash(_('Purchase %(id)s deleted', id=purchase_id), 'success')
    return redirect(url_for('purchases.list_purchases'))


@bp.route('/<purchase_id>/pdf', methods=['GET'], endpoint='purchase_pdf')
@login_required
def purchase_pdf(purchase_id):
    purchase = Purchase.query.filter_by(id=purchase_id).first_or_404()
    return pdf_response(render_purchase_pdf(purchase), f'purchase-{purchase.id}.pdf')
