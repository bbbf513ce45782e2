# Items blueprint: catalog of products / services used on line items.
from __future__ import annotations

from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_login import login_required

from extensions import db
from forms import ItemForm
from models import Category, Item, generate_id, quantize
from routes.common import search

bp = Blueprint('items', __name__, url_prefix='/items')


def _category_choices():
    rows = Category.query.order_by(Category.name.asc()).all()
    return [('', _('No category'))] + [(c.id, c.name) for c in rows]


def _apply_form(item: Item, form: ItemForm) -> None:
    item.name = form.name.data.strip()
    item.description = form.description.data or None
    item.category_id = form.category_id.data or None
    item.unit_price = quantize(form.unit_price.data)
    item.is_active = form.is_active.data


def _valid_category(form: ItemForm) -> bool:
    cid = form.category_id.data
    if cid and db.session.get(Category, cid) is None:
        form.category_id.errors.append(_('Unknown category'))
        return False
    return True


@bp.route('/', methods=['GET'], endpoint='list_items')
@login_required
def list_items():
    q = (request.args.get('q') or '').strip()
    category_id = (request.args.get('category') or '').strip()
    qry = search(Item.query, q, Item.name, Item.description)
    if category_id:
        qry = qry.filter(Item.category_id == category_id)
    items = qry.order_by(Item.name.asc()).all()
    categories = Category.query.order_by(Category.name.asc()).all()
    return render_template('items/list.html', items=items, categories=categories,
                           category_id=category_id, q=q)


@bp.route('/new', methods=['GET', 'POST'], endpoint='new_item')
@login_required
def new_item():
    form = ItemForm()
    form.category_id.choices = _category_choices()
    if form.validate_on_submit() and _valid_category(form):
        item = Item(id=generate_id('ITM', Item))
        _apply_form(item, form)
        try:
            db.session.add(item)
            db.session.commit()
        except Exception:
            db.session.rollback()
            current_app.logger.exception('Failed to create item')
            flash(_('Failed to create item'), 'danger')
        else:
            flash(_('Item %(name)s created', name=item.name), 'success')
            return redirect(url_for('items.list_items'))
    return render_template('items/form.html', form=form, item=None)


@bp.route('/<item_id>/edit', methods=['GET', 'POST'], endpoint='edit_item')
@login_required
def edit_item(item_id):
    item = Item.query.filter_by(id=item_id).first_or_404()
    form = ItemForm(obj=item)
    form.category_id.choices = _category_choices()
    if request.method == 'GET':
        form.category_id.data = item.category_id or ''
    if form.validate_on_submit() and _valid_category(form):
        _apply_form(item, form)
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            current_app.logger.exception('Failed to update item %s', item_id)
            flash(_('Failed to update item'), 'danger')
        else:
            flash(_('Item %(name)s updated', name=item.name), 'success')
            return redirect(url_for('items.list_items'))
    return render_template('items/form.html', form=form, item=item)


@bp.route('/<item_id>/delete', methods=['POST'], endpoint='delete_item')
@login_required
def delete_item(item_id):
    item = Item.query.filter_by(id=item_id).first_or_404()
    try:
        db.session.delete(item)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Failed to delete item %s', item_id)
        flash(_('Failed to delete item'), 'danger')
    else:
        flash(_('Item deleted'), 'success')
    return redirect(url_for('items.list_items'))


@bp.route('/api/items', methods=['GET'], endpoint='api_items')
@login_required
def api_items():
    q = (request.args.get('q') or '').strip()
    rows = search(Item.query.filter(Item.is_active == True), q, Item.name, Item.description) \
        .order_by(Item.name.asc()).limit(50).all()
    return jsonify([{
        'id': it.id,
        'name': it.name,
        'description': it.description or '',
        'unit_price': float(it.unit_price or 0),
        'category': it.category.name if it.category else None,
    } for it in rows])
