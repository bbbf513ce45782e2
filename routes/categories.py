# Categories blueprint.
from __future__ import annotations

from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_login import login_required
from sqlalchemy.exc import IntegrityError

from extensions import db
from forms import CategoryForm
from models import Category, Item, generate_id
from routes.common import search
from services.records import categories_from_transactions

bp = Blueprint('categories', __name__, url_prefix='/categories')


def _name_taken(name: str, exclude_id=None) -> bool:
    qry = Category.query.filter(db.func.lower(Category.name) == name.lower())
    if exclude_id:
        qry = qry.filter(Category.id != exclude_id)
    return db.session.query(qry.exists()).scalar()


@bp.route('/', methods=['GET'], endpoint='list_categories')
@login_required
def list_categories():
    q = (request.args.get('q') or '').strip()
    categories = search(Category.query, q, Category.name, Category.description) \
        .order_by(Category.name.asc()).all()
    counts = dict(db.session.query(Item.category_id, db.func.count(Item.id))
                  .group_by(Item.category_id).all())
    return render_template('categories/list.html', categories=categories, counts=counts, q=q)


@bp.route('/new', methods=['GET', 'POST'], endpoint='new_category')
@login_required
def new_category():
    form = CategoryForm()
    if form.validate_on_submit():
        name = form.name.data.strip()
        if _name_taken(name):
            flash(_('A category with this name already exists'), 'danger')
            return render_template('categories/form.html', form=form, category=None)
        category = Category(id=generate_id('CAT', Category), name=name,
                            description=form.description.data or None, is_active=form.is_active.data)
        try:
            db.session.add(category)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            flash(_('A category with this name already exists'), 'danger')
        else:
            flash(_('Category %(name)s created', name=category.name), 'success')
            return redirect(url_for('categories.list_categories'))
    return render_template('categories/form.html', form=form, category=None)


@bp.route('/<category_id>/edit', methods=['GET', 'POST'], endpoint='edit_category')
@login_required
def edit_category(category_id):
    category = Category.query.filter_by(id=category_id).first_or_404()
    form = CategoryForm(obj=category)
    if form.validate_on_submit():
        name = form.name.data.strip()
        if _name_taken(name, exclude_id=category.id):
            flash(_('A category with this name already exists'), 'danger')
            return render_template('categories/form.html', form=form, category=category)
        category.name = name
        category.description = form.description.data or None
        category.is_active = form.is_active.data
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            flash(_('Failed to update category'), 'danger')
        else:
            flash(_('Category %(name)s updated', name=category.name), 'success')
            return redirect(url_for('categories.list_categories'))
    return render_template('categories/form.html', form=form, category=category)


@bp.route('/<category_id>/delete', methods=['POST'], endpoint='delete_category')
@login_required
def delete_category(category_id):
    category = Category.query.filter_by(id=category_id).first_or_404()
    in_use = Item.query.filter_by(category_id=category.id).count()
    if in_use:
        flash(_('Category is used by %(n)d item(s) and cannot be deleted', n=in_use), 'danger')
        return redirect(url_for('categories.list_categories'))
    try:
        db.session.delete(category)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Failed to delete category %s', category_id)
        flash(_('Failed to delete category'), 'danger')
    else:
        flash(_('Category deleted'), 'success')
    return redirect(url_for('categories.list_categories'))


@bp.route('/api/categories', methods=['GET'], endpoint='api_categories')
@login_required
def api_categories():
    """Category names for selects: managed categories first, then ones used on transactions."""
    names = [c.name for c in Category.query.filter(Category.is_active == True)
             .order_by(Category.name.asc()).all()]
    for name in categories_from_transactions():
        if name not in names:
            names.append(name)
    return jsonify(names)
