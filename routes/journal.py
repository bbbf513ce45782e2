# Journal blueprint: manual entries, auto-balance / totals APIs, entry PDF.
from __future__ import annotations

from flask import Blueprint, current_app, flash, jsonify, redirect, render_template, request, url_for
from flask_babel import gettext as _
from flask_login import login_required

from extensions import db, csrf
from forms import JournalEntryForm
from models import Account, JournalEntry, generate_id, get_now, parse_amount
from routes.common import date_range_args, pdf_response, search
from services.journal import (
    AMOUNT_FIELDS,
    JournalBalanceError,
    auto_balance,
    delete_journal_entry,
    line_totals,
    save_journal_entry,
)
from services.pdf_export import journal_entry_pdf

bp = Blueprint('journal', __name__, url_prefix='/journal')


def _line_rows(form: JournalEntryForm) -> list:
    return [dict(entry.data) for entry in form.lines.entries]


def _account_names() -> list:
    rows = (db.session.query(Account.account_name)
            .filter(Account.is_active == True)
            .order_by(Account.account_code.asc()).all())
    return [name for (name,) in rows]


def _json_line(ln: dict) -> dict:
    return {
        'account': ln.get('account') or '',
        'description': ln.get('description') or '',
        'debit': float(ln.get('debit') or 0),
        'credit': float(ln.get('credit') or 0),
    }


def _payload_lines(payload) -> list:
    """Lines from a JSON payload; raises ValueError on a malformed shape or amount."""
    if not isinstance(payload, dict):
        raise ValueError('payload must be a JSON object')
    lines = payload.get('lines') or []
    if not isinstance(lines, list) or not all(isinstance(ln, dict) for ln in lines):
        raise ValueError('lines must be a list of objects')
    for ln in lines:
        for key in AMOUNT_FIELDS:
            parse_amount(ln.get(key))
    return lines


def _totals_payload(lines) -> dict:
    total_debit, total_credit = line_totals(lines)
    return {
        'total_debit': float(total_debit),
        'total_credit': float(total_credit),
        'difference': float(total_debit - total_credit),
        'balanced': abs(total_debit - total_credit) < 0.01 and total_debit > 0,
    }


@bp.route('/', methods=['GET'], endpoint='list_entries')
@login_required
def list_entries():
    q = (request.args.get('q') or '').strip()
    start, end = date_range_args()
    page = request.args.get('page', 1, type=int)

    qry = search(JournalEntry.query, q, JournalEntry.id, JournalEntry.description,
                 JournalEntry.reference, JournalEntry.category)
    if start:
        qry = qry.filter(JournalEntry.date >= start)
    if end:
        qry = qry.filter(JournalEntry.date <= end)
    pagination = qry.order_by(JournalEntry.date.desc(), JournalEntry.created_at.desc()).paginate(
        page=page, per_page=current_app.config.get('PER_PAGE', 50), error_out=False)
    return render_template('journal/list.html', pagination=pagination, entries=pagination.items,
                           q=q, start=start, end=end)


@bp.route('/new', methods=['GET', 'POST'], endpoint='new_entry')
@login_required
def new_entry():
    form = JournalEntryForm()
    if request.method == 'GET':
        form.date.data = get_now().date()
    if form.validate_on_submit():
        entry = JournalEntry(
            id=generate_id('JE', JournalEntry),
            date=form.date.data,
            reference=(form.reference.data or '').strip() or None,
            description=form.description.data.strip(),
            category=(form.category.data or '').strip() or None,
            notes=form.notes.data or None,
        )
        try:
            save_journal_entry(entry, _line_rows(form))
            db.session.commit()
        except JournalBalanceError as e:
            db.session.rollback()
            flash(str(e), 'danger')
        except Exception:
            db.session.rollback()
            current_app.logger.exception('Failed to create journal entry')
            flash(_('Failed to create journal entry'), 'danger')
        else:
            current_app.logger.info('Journal entry %s created (%s)', entry.id, entry.total_debit)
            flash(_('Journal entry %(id)s created', id=entry.id), 'success')
            return redirect(url_for('journal.list_entries'))
    elif request.method == 'POST':
        flash(_('Please correct the errors in the form'), 'danger')
    return render_template('journal/form.html', form=form, entry=None, two_line=False,
                           accounts=_account_names())


@bp.route('/<entry_id>/edit', methods=['GET', 'POST'], endpoint='edit_entry')
@login_required
def edit_entry(entry_id):
    entry = JournalEntry.query.filter_by(id=entry_id).first_or_404()
    if entry.source_type:
        flash(_('This entry is posted from %(kind)s %(id)s; edit the %(kind)s instead',
                kind=entry.source_type, id=entry.source_id), 'warning')
        return redirect(url_for('journal.list_entries'))

    # Two-line entries are edited with auto-balance; longer ones keep all their lines
    two_line = len(entry.lines) <= 2
    form = JournalEntryForm(obj=entry)
    if form.validate_on_submit():
        entry.date = form.date.data
        entry.reference = (form.reference.data or '').strip() or None
        entry.description = form.description.data.strip()
        entry.category = (form.category.data or '').strip() or None
        entry.notes = form.notes.data or None
        try:
            save_journal_entry(entry, _line_rows(form), require_two_lines=two_line)
            db.session.commit()
        except JournalBalanceError as e:
            db.session.rollback()
            flash(str(e), 'danger')
        except Exception:
            db.session.rollback()
            current_app.logger.exception('Failed to update journal entry %s', entry_id)
            flash(_('Failed to update journal entry'), 'danger')
        else:
            flash(_('Journal entry %(id)s updated', id=entry.id), 'success')
            return redirect(url_for('journal.list_entries'))
    elif request.method == 'POST':
        flash(_('Please correct the errors in the form'), 'danger')
    return render_template('journal/form.html', form=form, entry=entry, two_line=two_line,
                           accounts=_account_names())


@bp.route('/<entry_id>/delete', methods=['POST'], endpoint='delete_entry')
@login_required
def delete_entry(entry_id):
    entry = JournalEntry.query.filter_by(id=entry_id).first_or_404()
    try:
        delete_journal_entry(entry)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception('Failed to delete journal entry %s', entry_id)
        flash(_('Failed to delete journal entry'), 'danger')
    else:
        flash(_('Journal entry %(id)s deleted', id=entry_id), 'success')
    return redirect(url_for('journal.list_entries'))


@bp.route('/<entry_id>/pdf', methods=['GET'], endpoint='entry_pdf')
@login_required
def entry_pdf(entry_id):
    entry = JournalEntry.query.filter_by(id=entry_id).first_or_404()
    return pdf_response(journal_entry_pdf(entry), f'journal-{entry.id}.pdf')


@bp.route('/api/auto-balance', methods=['POST'], endpoint='api_auto_balance')
@csrf.exempt
@login_required
def api_auto_balance():
    """Apply one debit/credit edit to a two-line entry and return the mirrored lines."""
    payload = request.get_json(silent=True) or {}
    try:
        lines = _payload_lines(payload)
        field = payload.get('field')
        value = parse_amount(payload.get('value'))
        index = int(payload.get('index'))
        balanced = auto_balance(lines, index, field, value)
    except (TypeError, ValueError, IndexError) as e:
        return jsonify({'error': str(e)}), 400
    out = [_json_line(ln) for ln in balanced]
    return jsonify({'lines': out, **_totals_payload(balanced)})


@bp.route('/api/totals', methods=['POST'], endpoint='api_totals')
@csrf.exempt
@login_required
def api_totals():
    payload = request.get_json(silent=True) or {}
    try:
        lines = _payload_lines(payload)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify(_totals_payload(lines))
