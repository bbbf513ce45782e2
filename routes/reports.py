# Reports blueprint: summary / profit & loss / monthly tabs and their PDF / XLSX exports.
from __future__ import annotations

from flask import Blueprint, current_app, flash, redirect, render_template, request, send_file, url_for
from flask_babel import gettext as _
from flask_login import login_required

from forms import ReportRangeForm
from models import JournalEntry, Purchase, Sale
from services.aggregates import financial_summary, monthly_breakdown
from services.excel_export import XLSX_MIMETYPE, financial_report_xlsx
from services.pdf_export import financial_report_pdf
from routes.common import pdf_response

bp = Blueprint('reports', __name__, url_prefix='/reports')

TABS = ('summary', 'profit-loss', 'monthly')


def _period_records(start, end):
    """Sales, purchases and journal entries dated inside [start, end]."""
    sales_q = Sale.query
    purchases_q = Purchase.query
    journal_q = JournalEntry.query
    if start:
        sales_q = sales_q.filter(Sale.date >= start)
        purchases_q = purchases_q.filter(Purchase.date >= start)
        journal_q = journal_q.filter(JournalEntry.date >= start)
    if end:
        sales_q = sales_q.filter(Sale.date <= end)
        purchases_q = purchases_q.filter(Purchase.date <= end)
        journal_q = journal_q.filter(JournalEntry.date <= end)
    return (sales_q.order_by(Sale.date.asc()).all(),
            purchases_q.order_by(Purchase.date.asc()).all(),
            journal_q.order_by(JournalEntry.date.asc()).all())


def _range(form: ReportRangeForm):
    start, end = form.start_date.data, form.end_date.data
    if start and end and start > end:
        start, end = end, start
    return start, end


@bp.route('/', methods=['GET'], endpoint='index')
@login_required
def index():
    form = ReportRangeForm(request.args)
    form.validate()
    start, end = _range(form)
    tab = request.args.get('tab') or 'summary'
    if tab not in TABS:
        tab = 'summary'
    sales, purchases, entries = _period_records(start, end)
    return render_template(
        'reports/index.html',
        form=form, tab=tab, start=start, end=end,
        summary=financial_summary(sales, purchases),
        monthly=monthly_breakdown(sales, purchases),
        journal_count=len(entries),
    )


@bp.route('/pdf', methods=['GET'], endpoint='report_pdf')
@login_required
def report_pdf():
    form = ReportRangeForm(request.args)
    form.validate()
    start, end = _range(form)
    sales, purchases, entries = _period_records(start, end)
    try:
        buf = financial_report_pdf(sales, purchases, entries, start, end)
    except Exception:
        current_app.logger.exception('Financial report PDF failed')
        flash(_('Failed to generate report'), 'danger')
        return redirect(url_for('reports.index', **request.args))
    return pdf_response(buf, 'financial-report.pdf')


@bp.route('/xlsx', methods=['GET'], endpoint='report_xlsx')
@login_required
def report_xlsx():
    form = ReportRangeForm(request.args)
    form.validate()
    start, end = _range(form)
    sales, purchases, entries = _period_records(start, end)
    try:
        buf = financial_report_xlsx(sales, purchases, entries, start, end)
    except Exception:
        current_app.logger.exception('Financial report XLSX failed')
        flash(_('Failed to generate report'), 'danger')
        return redirect(url_for('reports.index', **request.args))
    return send_file(buf, as_attachment=True, download_name='financial-report.xlsx', mimetype=XLSX_MIMETYPE)
