# -*- coding: utf-8 -*-
"""
Sales, purchases, invoices and purchase orders: a parent row plus its line
items, written in a single transaction.

- amount = subtotal + tax for sales and invoices; amount = subtotal otherwise.
- A failed write rolls the whole session back; nothing is left half-saved.
- Sales and purchases are re-posted to the journal on every save.
"""
from __future__ import annotations

import logging
from collections import namedtuple
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from extensions import db
from models import (
    Invoice,
    InvoiceItem,
    JournalEntry,
    Purchase,
    PurchaseItem,
    PurchaseOrder,
    PurchaseOrderItem,
    Sale,
    SaleItem,
    generate_id,
    quantize,
    to_decimal,
)
from services.journal import post_purchase, post_sale, unpost

logger = logging.getLogger(__name__)

Totals = namedtuple('Totals', ['subtotal', 'tax_amount', 'amount'])


class RecordSaveError(Exception):
    """A sale / purchase / invoice / purchase order could not be saved or deleted."""


def _get(line: Any, key: str, default=None):
    if isinstance(line, dict):
        return line.get(key, default)
    return getattr(line, key, default)


def line_amount(line: Any) -> Decimal:
    return quantize(to_decimal(_get(line, 'quantity')) * to_decimal(_get(line, 'unit_price')))


def compute_totals(lines: Iterable[Any], tax_percentage=None) -> Totals:
    subtotal = quantize(sum((line_amount(ln) for ln in lines), Decimal('0')))
    pct = to_decimal(tax_percentage)
    tax_amount = quantize(subtotal * pct / Decimal('100')) if pct > 0 else Decimal('0.00')
    return Totals(subtotal, tax_amount, subtotal + tax_amount)


def clean_item_lines(lines: Iterable[Any]) -> List[Any]:
    """Drop blank form rows (no description and no price)."""
    kept = []
    for ln in lines:
        desc = (_get(ln, 'description') or '').strip()
        if desc or to_decimal(_get(ln, 'unit_price')) != 0:
            kept.append(ln)
    return kept


def validate_items(lines: Iterable[Any]) -> Tuple[bool, str]:
    kept = clean_item_lines(lines)
    if not kept:
        return False, 'Add at least one item'
    for ln in kept:
        if not (_get(ln, 'description') or '').strip():
            return False, 'Every item needs a description'
        if to_decimal(_get(ln, 'quantity')) <= 0:
            return False, 'Item quantity must be greater than zero'
        if to_decimal(_get(ln, 'unit_price')) < 0:
            return False, 'Item price cannot be negative'
    return True, ''


def replace_line_items(parent, relationship: str, model, lines: Iterable[Any]) -> list:
    """Swap the parent's children for the submitted rows (old rows are orphan-deleted)."""
    taken = set()
    items = []
    for i, ln in enumerate(lines, start=1):
        items.append(model(
            id=generate_id('ITM', model, taken=taken),
            line_no=i,
            description=(_get(ln, 'description') or '').strip(),
            quantity=quantize(_get(ln, 'quantity')),
            unit_price=quantize(_get(ln, 'unit_price')),
        ))
    setattr(parent, relationship, items)
    return items


def _save(model, item_model, prefix: str, data: Dict[str, Any], lines, record=None,
          taxed: bool = False, post=None):
    lines = list(lines)
    ok, error = validate_items(lines)
    if not ok:
        raise RecordSaveError(error)
    kept = clean_item_lines(lines)
    try:
        if record is None:
            record = model(id=generate_id(prefix, model))
            db.session.add(record)
        for key, value in data.items():
            setattr(record, key, value)
        tax_pct = to_decimal(data.get('tax_percentage')) if taxed else Decimal('0')
        totals = compute_totals(kept, tax_pct)
        replace_line_items(record, 'items', item_model, kept)
        record.amount = totals.amount
        if taxed:
            record.tax_percentage = quantize(tax_pct) if tax_pct > 0 else None
            record.tax_amount = totals.tax_amount if tax_pct > 0 else None
        if post is not None:
            post(record)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.exception('Failed to save %s', model.__name__)
        raise RecordSaveError(str(e) or f'Failed to save {model.__name__}') from e
    logger.info('Saved %s %s amount=%s', model.__name__, record.id, record.amount)
    return record


def save_sale(data: Dict[str, Any], lines, sale: Optional[Sale] = None, post: bool = True) -> Sale:
    return _save(Sale, SaleItem, 'INV', data, lines, record=sale, taxed=True,
                 post=post_sale if post else None)


def save_purchase(data: Dict[str, Any], lines, purchase: Optional[Purchase] = None,
                  post: bool = True) -> Purchase:
    return _save(Purchase, PurchaseItem, 'PO', data, lines, record=purchase,
                 post=post_purchase if post else None)


def save_invoice(data: Dict[str, Any], lines, invoice: Optional[Invoice] = None) -> Invoice:
    return _save(Invoice, InvoiceItem, 'INV', data, lines, record=invoice, taxed=True)


def save_purchase_order(data: Dict[str, Any], lines,
                        order: Optional[PurchaseOrder] = None) -> PurchaseOrder:
    return _save(PurchaseOrder, PurchaseOrderItem, 'PO', data, lines, record=order)


def delete_record(record) -> None:
    """Delete a record with its items and, for sales / purchases, its posting."""
    record_id = record.id
    try:
        if getattr(record, 'journal_entry', None) is not None:
            unpost(record)
        db.session.delete(record)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.exception('Failed to delete %s %s', type(record).__name__, record_id)
        raise RecordSaveError(str(e) or 'Failed to delete record') from e
    logger.info('Deleted %s %s', type(record).__name__, record_id)


def categories_from_transactions() -> List[str]:
    """Distinct non-empty categories used by sales, purchases and journal entries."""
    seen = []
    for model in (Sale, Purchase, JournalEntry):
        rows = (db.session.query(model.category)
                .filter(model.category.isnot(None))
                .order_by(model.date.asc(), model.created_at.asc())
                .all())
        for (name,) in rows:
            name = (name or '').strip()
            if name and name not in seen:
                seen.append(name)
    return seen
