# -*- coding: utf-8 -*-
"""
Double-entry journal rules.

- Every journal entry's lines must sum to equal total debit and total credit.
- Totals are always recomputed from the lines; they are never taken from input.
- Sales and purchases can be posted to the journal automatically; the posting
  is rewritten whenever the source record changes.

Lines are accepted as dicts (form data) or objects with ``account``,
``description``, ``debit`` and ``credit`` attributes.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from extensions import db
from models import (
    Account,
    JournalEntry,
    JournalLineItem,
    Purchase,
    Sale,
    generate_id,
    quantize,
    to_decimal,
)
from data.chart_of_accounts import DEFAULT_ACCOUNTS, POSTING_ACCOUNTS, account_by_code

logger = logging.getLogger(__name__)

BALANCE_TOLERANCE = Decimal('0.01')
AMOUNT_FIELDS = ('debit', 'credit')


class JournalBalanceError(ValueError):
    """Raised when an entry would be persisted unbalanced or otherwise invalid."""


def _get(line: Any, key: str, default=None):
    if isinstance(line, dict):
        return line.get(key, default)
    return getattr(line, key, default)


def _text(line: Any, key: str) -> str:
    return (_get(line, key) or '').strip()


def opposite(field: str) -> str:
    if field not in AMOUNT_FIELDS:
        raise ValueError(f'Unknown amount field: {field!r}')
    return 'credit' if field == 'debit' else 'debit'


def line_totals(lines: Iterable[Any]) -> Tuple[Decimal, Decimal]:
    """(total_debit, total_credit); blank amounts count as zero."""
    total_debit = Decimal('0')
    total_credit = Decimal('0')
    for ln in lines:
        total_debit += to_decimal(_get(ln, 'debit'))
        total_credit += to_decimal(_get(ln, 'credit'))
    return quantize(total_debit), quantize(total_credit)


def is_balanced(lines: Iterable[Any], tolerance: Decimal = BALANCE_TOLERANCE) -> bool:
    total_debit, total_credit = line_totals(lines)
    return abs(total_debit - total_credit) < tolerance


def auto_balance(lines: List[Any], index: int, field: str, value) -> List[Dict[str, Any]]:
    """Apply an amount edit to a two-line entry and mirror it onto the other line.

    A positive debit on one line zeroes that line's credit and puts the same
    amount as credit on the other line (whose debit is zeroed); credit edits
    mirror the other way. A zero or blank value only updates the edited cell.
    Returns new line dicts; the input is left untouched.
    """
    if len(lines) != 2:
        raise ValueError('Auto-balance needs exactly two lines')
    if index not in (0, 1):
        raise IndexError(f'Line index out of range: {index}')
    other_field = opposite(field)

    out = []
    for ln in lines:
        out.append({
            'account': _get(ln, 'account') or '',
            'description': _get(ln, 'description') or '',
            'debit': quantize(_get(ln, 'debit')),
            'credit': quantize(_get(ln, 'credit')),
        })

    amount = quantize(value)
    out[index][field] = amount
    if amount > 0:
        other = 1 - index
        out[index][other_field] = Decimal('0.00')
        out[other][other_field] = amount
        out[other][field] = Decimal('0.00')
    return out


def clean_lines(lines: Iterable[Any]) -> List[Any]:
    """Drop form rows that carry no account, no description and no amount."""
    kept = []
    for ln in lines:
        if (_text(ln, 'account') or _text(ln, 'description')
                or to_decimal(_get(ln, 'debit')) != 0 or to_decimal(_get(ln, 'credit')) != 0):
            kept.append(ln)
    return kept


def validate_entry(description: str, lines: Iterable[Any],
                   require_two_lines: bool = False) -> Tuple[bool, str]:
    """
    Check an entry before it is saved.

    Returns:
        (ok, error_message); error_message is empty when ok.
    """
    if not (description or '').strip():
        return False, 'Please enter a description'

    kept = clean_lines(lines)
    for ln in kept:
        if not _text(ln, 'account') or not _text(ln, 'description'):
            return False, 'Please fill in all line item details'
        debit = to_decimal(_get(ln, 'debit'))
        credit = to_decimal(_get(ln, 'credit'))
        if debit != 0 and credit != 0:
            return False, 'A line cannot carry both a debit and a credit'
        if debit < 0 or credit < 0:
            return False, 'Debit and credit amounts cannot be negative'

    if require_two_lines and len(kept) != 2:
        return False, 'This entry must have exactly two lines'
    if len(kept) < 2:
        return False, 'A journal entry needs at least two lines'

    total_debit, total_credit = line_totals(kept)
    if abs(total_debit - total_credit) >= BALANCE_TOLERANCE:
        return False, (
            f'Journal entry must be balanced: total debit ({total_debit}) '
            f'must equal total credit ({total_credit})'
        )
    if total_debit <= 0:
        return False, 'Journal entry amounts must be greater than zero'
    return True, ''


def save_journal_entry(entry: JournalEntry, lines: Iterable[Any],
                       require_two_lines: bool = False) -> JournalEntry:
    """Validate, replace the entry's lines and recompute its totals.

    Adds to the current session without committing; the caller owns the
    transaction.
    """
    lines = list(lines)
    ok, error = validate_entry(entry.description, lines, require_two_lines=require_two_lines)
    if not ok:
        raise JournalBalanceError(error)

    kept = clean_lines(lines)
    taken = set()
    new_lines = []
    for i, ln in enumerate(kept, start=1):
        new_lines.append(JournalLineItem(
            id=generate_id('JLI', JournalLineItem, taken=taken),
            line_no=i,
            account=_text(ln, 'account'),
            description=_text(ln, 'description'),
            debit=quantize(_get(ln, 'debit')),
            credit=quantize(_get(ln, 'credit')),
        ))
    entry.lines = new_lines
    entry.total_debit, entry.total_credit = line_totals(new_lines)
    db.session.add(entry)
    return entry


def delete_journal_entry(entry: JournalEntry) -> None:
    """Delete an entry and detach any sale or purchase posted to it."""
    Sale.query.filter_by(journal_entry_id=entry.id).update(
        {'journal_entry_id': None}, synchronize_session=False)
    Purchase.query.filter_by(journal_entry_id=entry.id).update(
        {'journal_entry_id': None}, synchronize_session=False)
    db.session.delete(entry)


def ensure_accounts() -> int:
    """Create any default chart-of-accounts rows that are missing."""
    existing = {code for (code,) in db.session.query(Account.account_code).all()}
    names = {name for (name,) in db.session.query(Account.account_name).all()}
    taken = set()
    created = 0
    for meta in DEFAULT_ACCOUNTS:
        if meta['code'] in existing or meta['name'] in names:
            continue
        db.session.add(Account(
            id=generate_id('ACC', Account, taken=taken),
            account_code=meta['code'],
            account_name=meta['name'],
            account_type=meta['type'],
            normal_balance=meta['normal_balance'],
        ))
        created += 1
    if created:
        db.session.flush()
        logger.info('Seeded %s chart of accounts rows', created)
    return created


def posting_account(role: str) -> str:
    """Account name used for a posting role (cash, receivable, revenue, ...)."""
    code = POSTING_ACCOUNTS[role]
    acc = Account.query.filter_by(account_code=code).first()
    if acc is None:
        ensure_accounts()
        acc = Account.query.filter_by(account_code=code).first()
    if acc is not None:
        return acc.account_name
    return account_by_code(code)['name']


def _posted_entry(record, source_type: str) -> JournalEntry:
    entry = record.journal_entry
    if entry is None:
        entry = JournalEntry(
            id=generate_id('JE', JournalEntry),
            source_type=source_type,
            source_id=record.id,
        )
    return entry


def unpost(record) -> None:
    """Remove the automatic posting of a sale or purchase, if any."""
    entry = record.journal_entry
    if entry is None:
        return
    record.journal_entry = None
    record.journal_entry_id = None
    db.session.delete(entry)


def post_sale(sale: Sale) -> Optional[JournalEntry]:
    """Post a sale: debit Cash (paid) or Receivable, credit Revenue and Sales Tax."""
    amount = quantize(sale.amount)
    if amount <= 0:
        unpost(sale)
        return None
    tax = quantize(sale.tax_amount or 0)
    revenue = amount - tax

    debit_role = 'cash' if sale.status == 'Paid' else 'receivable'
    lines = [{
        'account': posting_account(debit_role),
        'description': f'Sale {sale.id} - {sale.customer}',
        'debit': amount,
        'credit': 0,
    }, {
        'account': posting_account('revenue'),
        'description': f'Revenue {sale.id}',
        'debit': 0,
        'credit': revenue,
    }]
    if tax > 0:
        lines.append({
            'account': posting_account('sales_tax'),
            'description': f'Sales tax {sale.id}',
            'debit': 0,
            'credit': tax,
        })

    entry = _posted_entry(sale, 'sale')
    entry.date = sale.date
    entry.reference = sale.id
    entry.description = f'Sale {sale.id} - {sale.customer}'
    entry.category = sale.category
    save_journal_entry(entry, lines)
    sale.journal_entry = entry
    logger.info('Posted sale %s to journal entry %s (%s)', sale.id, entry.id, amount)
    return entry


def post_purchase(purchase: Purchase) -> Optional[JournalEntry]:
    """Post a purchase: debit Purchases, credit Cash (received) or Payable."""
    amount = quantize(purchase.amount)
    if purchase.status == 'Cancelled' or amount <= 0:
        unpost(purchase)
        return None

    credit_role = 'cash' if purchase.status == 'Received' else 'payable'
    lines = [{
        'account': posting_account('purchases'),
        'description': f'Purchase {purchase.id} - {purchase.supplier}',
        'debit': amount,
        'credit': 0,
    }, {
        'account': posting_account(credit_role),
        'description': f'Settlement {purchase.id}',
        'debit': 0,
        'credit': amount,
    }]

    entry = _posted_entry(purchase, 'purchase')
    entry.date = purchase.date
    entry.reference = purchase.id
    entry.description = f'Purchase {purchase.id} - {purchase.supplier}'
    entry.category = purchase.category
    save_journal_entry(entry, lines)
    purchase.journal_entry = entry
    logger.info('Posted purchase %s to journal entry %s (%s)', purchase.id, entry.id, amount)
    return entry
