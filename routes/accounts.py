# Chart of accounts blueprint.
from __future__ import annotations

from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_login import login_required
from sqlalchemy.exc import IntegrityError

from extensions import db, csrf
from forms import AccountForm
from models import ACCOUNT_TYPES, Account, generate_id

bp = Blueprint('accounts', __name__, url_prefix='/accounts')

# Code ranges per account type, used when an account is created by name only
CODE_BASE = {'Asset': 1000, 'Liability': 2000, 'Equity': 3000, 'Revenue': 4000, 'Expense': 5000}
NORMAL_BALANCE = {'Asset': 'Debit', 'Expense': 'Debit', 'Liability': 'Credit', 'Equity': 'Credit',
                  'Revenue': 'Credit'}


def next_account_code(account_type: str) -> str:
    base = CODE_BASE.get(account_type, 5000)
    codes = [c for (c,) in db.session.query(Account.account_code).all()]
    used = {int(c) for c in codes if c and c.isdigit() and base <= int(c) < base + 1000}
    candidate = base + 900
    while candidate in used and candidate < base + 999:
        candidate += 1
    return str(candidate)


@bp.route('/', methods=['GET'], endpoint='list_accounts')
@login_required
def list_accounts():
    accounts = Account.query.order_by(Account.account_code.asc()).all()
    grouped = {t: [a for a in accounts if a.account_type == t] for t in ACCOUNT_TYPES}
    return render_template('accounts/list.html', grouped=grouped, total=len(accounts))


@bp.route('/new', methods=['GET', 'POST'], endpoint='new_account')
@login_required
def new_account():
    form = AccountForm()
    if form.validate_on_submit():
        acc = Account(
            id=generate_id('ACC', Account),
            account_code=form.account_code.data.strip(),
            account_name=form.account_name.data.strip(),
            account_type=form.account_type.data,
            normal_balance=form.normal_balance.data,
        )
        try:
            db.session.add(acc)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            flash(_('Account code or name already exists'), 'danger')
        else:
            flash(_('Account %(code)s %(name)s created', code=acc.account_code, name=acc.account_name), 'success')
            return redirect(url_for('accounts.list_accounts'))
    return render_template('accounts/form.html', form=form)


@bp.route('/api/accounts', methods=['GET'], endpoint='api_accounts')
@login_required
def api_accounts():
    rows = db.session.query(Account.account_code, Account.account_name, Account.account_type) \
        .filter(Account.is_active == True).order_by(Account.account_code.asc()).all()
    return jsonify([{'code': code, 'name': name, 'type': atype} for (code, name, atype) in rows])


@bp.route('/api/accounts', methods=['POST'], endpoint='api_create_account')
@csrf.exempt
@login_required
def api_create_account():
    """Create an account from a typed name (journal line account picker)."""
    payload = request.get_json(silent=True) or {}
    name = (payload.get('name') or '').strip()
    account_type = payload.get('type') or 'Expense'
    if not name:
        return jsonify({'error': 'name is required'}), 400
    if account_type not in ACCOUNT_TYPES:
        return jsonify({'error': f'unknown account type: {account_type}'}), 400

    existing = Account.query.filter(db.func.lower(Account.account_name) == name.lower()).first()
    if existing:
        return jsonify({'code': existing.account_code, 'name': existing.account_name,
                        'type': existing.account_type, 'created': False})

    acc = Account(
        id=generate_id('ACC', Account),
        account_code=next_account_code(account_type),
        account_name=name,
        account_type=account_type,
        normal_balance=NORMAL_BALANCE[account_type],
    )
    try:
        db.session.add(acc)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning('Account %s could not be created', name)
        return jsonify({'error': 'account could not be created'}), 409
    return jsonify({'code': acc.account_code, 'name': acc.account_name,
                    'type': acc.account_type, 'created': True}), 201
