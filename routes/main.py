# Main blueprint: dashboard, login/logout, company settings, dashboard chart APIs.
from __future__ import annotations

from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_login import current_user, login_required, login_user, logout_user
from sqlalchemy import func

from extensions import db
from forms import LoginForm, SettingsForm
from models import (
    INVOICE_STATUSES, PURCHASE_ORDER_STATUSES, Invoice, Purchase, PurchaseOrder, Sale, Settings,
    User, get_now,
)
from services.aggregates import cash_flow, dashboard_stats, revenue_vs_expenses, status_counts

bp = Blueprint('main', __name__)


def _series(points, *keys):
    return [{**p, **{k: float(p[k]) for k in keys}} for p in points]


@bp.route('/', methods=['GET'], endpoint='dashboard')
@login_required
def dashboard():
    sales = Sale.query.all()
    purchases = Purchase.query.all()
    invoices = Invoice.query.all()
    orders = PurchaseOrder.query.all()
    stats = dashboard_stats(sales, purchases, invoices, today=get_now().date())

    recent = sorted(
        [{'kind': 'sale', 'id': s.id, 'party': s.customer, 'date': s.date, 'amount': s.amount, 'status': s.status}
         for s in sales]
        + [{'kind': 'purchase', 'id': p.id, 'party': p.supplier, 'date': p.date, 'amount': p.amount, 'status': p.status}
           for p in purchases],
        key=lambda r: (r['date'], r['id']), reverse=True,
    )[:5]
    return render_template(
        'dashboard.html',
        stats=stats,
        recent=recent,
        invoice_counts=status_counts(invoices, INVOICE_STATUSES),
        order_counts=status_counts(orders, PURCHASE_ORDER_STATUSES),
        invoice_total=len(invoices),
        order_total=len(orders),
        year=get_now().year,
    )


@bp.route('/api/dashboard/revenue-expenses', methods=['GET'], endpoint='api_revenue_expenses')
@login_required
def api_revenue_expenses():
    year = request.args.get('year', type=int) or get_now().year
    points = revenue_vs_expenses(Sale.query.all(), Purchase.query.all(), year)
    return jsonify({'year': year, 'points': _series(points, 'sales', 'expenses')})


@bp.route('/api/dashboard/cash-flow', methods=['GET'], endpoint='api_cash_flow')
@login_required
def api_cash_flow():
    now = get_now()
    year = request.args.get('year', type=int) or now.year
    month = request.args.get('month', type=int) or now.month
    if not 1 <= month <= 12:
        return jsonify({'error': 'month must be between 1 and 12'}), 400
    weeks = cash_flow(Sale.query.all(), Purchase.query.all(), year, month)
    return jsonify({'year': year, 'month': month, 'weeks': _series(weeks, 'inflow', 'outflow')})


@bp.route('/login', methods=['GET', 'POST'], endpoint='login')
def login():
    if current_user.is_authenticated:
        return redirect(url_for('main.dashboard'))
    form = LoginForm()
    if form.validate_on_submit():
        username = form.username.data.strip()
        password = form.password.data
        user = User.query.filter(func.lower(User.username) == username.lower()).first()

        # First run: with no users at all, admin/admin123 creates the default admin
        if user is None and User.query.count() == 0 and username == 'admin' and password == 'admin123':
            user = User(username='admin', active=True)
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            current_app.logger.warning('Default admin user created on first login')
            flash(_('Default admin user created'), 'success')

        if user and user.is_active and user.check_password(password):
            user.last_login_at = get_now()
            db.session.commit()
            login_user(user, remember=form.remember.data)
            next_url = request.args.get('next')
            if next_url and next_url.startswith('/') and not next_url.startswith('//'):
                return redirect(next_url)
            return redirect(url_for('main.dashboard'))
        current_app.logger.info('Failed login for %s', username)
        flash(_('Invalid username or password'), 'danger')
    return render_template('login.html', form=form)


@bp.route('/logout', methods=['GET'], endpoint='logout')
@login_required
def logout():
    logout_user()
    flash(_('You have been logged out'), 'info')
    return redirect(url_for('main.login'))


@bp.route('/settings', methods=['GET', 'POST'], endpoint='settings')
@login_required
def settings():
    s = Settings.current()
    if s is None:
        cfg = current_app.config
        s = Settings(company_name=cfg.get('COMPANY_NAME'), email=cfg.get('COMPANY_EMAIL'),
                     phone=cfg.get('COMPANY_PHONE'), address=cfg.get('COMPANY_ADDRESS'),
                     currency=cfg.get('CURRENCY'), email_notifications=True, dark_mode=False,
                     auto_save=True)
    form = SettingsForm(obj=s)
    if form.validate_on_submit():
        form.populate_obj(s)
        s.currency = (s.currency or current_app.config.get('CURRENCY', 'IDR')).strip().upper()
        try:
            db.session.add(s)
            db.session.commit()
        except Exception:
            db.session.rollback()
            current_app.logger.exception('Failed to save settings')
            flash(_('Failed to save settings'), 'danger')
            return render_template('settings.html', form=form)
        flash(_('Settings saved'), 'success')
        return redirect(url_for('main.settings'))
    return render_template('settings.html', form=form)
