# Contacts blueprint: customers and suppliers in one list.
from __future__ import annotations

from flask import Blueprint, Response, current_app, flash, jsonify, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_login import login_required

from extensions import db
from forms import ContactForm
from models import Contact, generate_id, quantize
from routes.common import search
from services.excel_export import contacts_csv

bp = Blueprint('contacts', __name__, url_prefix='/contacts')

TABS = {'all': None, 'customer': 'Customer', 'supplier': 'Supplier'}


def _contacts_query(tab: str, q: str):
    qry = Contact.query
    ctype = TABS.get(tab)
    if ctype:
        qry = qry.filter(Contact.type == ctype)
    return search(qry, q, Contact.name, Contact.email).order_by(Contact.name.asc())


def _apply_form(contact: Contact, form: ContactForm) -> None:
    contact.name = form.name.data.strip()
    contact.email = (form.email.data or '').strip() or None
    contact.phone = (form.phone.data or '').strip() or None
    contact.type = form.type.data
    contact.balance = quantize(form.balance.data)


@bp.route('/', methods=['GET'], endpoint='list_contacts')
@login_required
def list_contacts():
    tab = (request.args.get('tab') or 'all').strip().lower()
    if tab not in TABS:
        tab = 'all'
    q = (request.args.get('q') or '').strip()
    contacts = _contacts_query(tab, q).all()
    return render_template('contacts/list.html', contacts=contacts, tab=tab, q=q)


@bp.route('/new', methods=['GET', 'POST'], endpoint='new_contact')
@login_required
def new_contact():
    form = ContactForm()
    if request.method == 'GET' and request.args.get('type') in ('Customer', 'Supplier'):
        form.type.data = request.args.get('type')
    if form.validate_on_submit():
        contact = Contact(id=generate_id('CON', Contact))
        _apply_form(contact, form)
        try:
            db.session.add(contact)
            db.session.commit()
        except Exception:
            db.session.rollback()
            current_app.logger.exception('Failed to create contact')
            flash(_('Failed to create contact'), 'danger')
        else:
            flash(_('Contact %(name)s created', name=contact.name), 'success')
            return redirect(url_for('contacts.list_contacts'))
    return render_template('contacts/form.html', form=form, contact=None)


@bp.route('/<contact_id>/edit', methods=['GET', 'POST'], endpoint='edit_contact')
@login_required
def edit_contact(contact_id):
    contact = Contact.query.filter_by(id=contact_id).first_or_404()
    form = ContactForm(obj=contact)
    if form.validate_on_submit():
        _apply_form(contact, form)
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            current_app.logger.exception('Failed to update contact %s', contact_id)
            flash(_('Failed to update contact'), 'danger')
        else:
            flash(_('Contact %(name)s updated', name=contact.name), 'success')
            return redirect(url_for('contacts.list_contacts'))
    return render_template('contacts/form.html', form=form, contact=contact)


@bp.route('/<contact_id>/delete', methods=['POST'], endpoint='delete_contact')
@login_required
def delete_contact(contact_id):
    contact = Contact.query.filter_by(id=contact_id).first_or_404()
    try:
        db.session.delete(contact)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Failed to delete contact %s', contact_id)
        flash(_('Failed to delete contact'), 'danger')
    else:
        flash(_('Contact deleted'), 'success')
    return redirect(url_for('contacts.list_contacts'))


@bp.route('/export.csv', methods=['GET'], endpoint='export_contacts')
@login_required
def export_contacts():
    tab = (request.args.get('tab') or 'all').strip().lower()
    q = (request.args.get('q') or '').strip()
    body = contacts_csv(_contacts_query(tab, q).all())
    return Response(body, mimetype='text/csv',
                    headers={'Content-Disposition': 'attachment; filename=contacts.csv'})


def _names(ctype: str):
    q = (request.args.get('q') or '').strip()
    rows = search(Contact.query.filter(Contact.type == ctype), q, Contact.name, Contact.email) \
        .order_by(Contact.name.asc()).limit(50).all()
    return jsonify([{'id': c.id, 'name': c.name, 'email': c.email or ''} for c in rows])


@bp.route('/api/customers', methods=['GET'], endpoint='api_customers')
@login_required
def api_customers():
    return _names('Customer')


@bp.route('/api/suppliers', methods=['GET'], endpoint='api_suppliers')
@login_required
def api_suppliers():
    return _names('Supplier')
