# -*- coding: utf-8 -*-
"""
PDF documents for sales, invoices, purchases, purchase orders, journal
entries and the financial report (reportlab platypus, A4).

Every builder returns a BytesIO positioned at 0, ready for ``send_file``.
"""
from __future__ import annotations

import io
from datetime import timedelta
from typing import Any, Dict, Iterable, Optional
from xml.sax.saxutils import escape

from flask import current_app, has_app_context
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from models import Settings, to_decimal
from services.aggregates import financial_summary
from services.formatting import fmt_date, money, truncate

HEADER_FILL = colors.HexColor('#475569')

INVOICE_TERMS = 'Payment due within {days} days. Late payments subject to 2% fee.'
PURCHASE_ORDER_TERMS = 'Please confirm receipt of this purchase order within 2 business days.'


def company_profile() -> Dict[str, str]:
    """Company details: the settings row wins over configured defaults."""
    cfg = current_app.config if has_app_context() else {}
    profile = {
        'name': cfg.get('COMPANY_NAME', 'BookKeep Inc.'),
        'address': cfg.get('COMPANY_ADDRESS', ''),
        'phone': cfg.get('COMPANY_PHONE', ''),
        'email': cfg.get('COMPANY_EMAIL', ''),
        'bank': cfg.get('COMPANY_BANK', ''),
        'bank_account': cfg.get('COMPANY_BANK_ACCOUNT', ''),
    }
    if has_app_context():
        s = Settings.current()
        if s:
            profile['name'] = (s.company_name or '').strip() or profile['name']
            profile['address'] = (s.address or '').strip() or profile['address']
            profile['phone'] = (s.phone or '').strip() or profile['phone']
            profile['email'] = (s.email or '').strip() or profile['email']
    return profile


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle('Company', parent=styles['Title'], fontSize=18, spaceAfter=2))
    styles.add(ParagraphStyle('CenterSmall', parent=styles['Normal'], alignment=TA_CENTER, fontSize=9))
    styles.add(ParagraphStyle('DocTitle', parent=styles['Heading2'], alignment=TA_CENTER, spaceBefore=8))
    return styles


def _p(text, style) -> Paragraph:
    return Paragraph(escape(str(text or '')), style)


def _header(title: str, styles, company: Dict[str, str]) -> list:
    elements = [_p(company['name'], styles['Company'])]
    if company.get('address'):
        elements.append(_p(company['address'], styles['CenterSmall']))
    contact = ' | '.join(x for x in (
        f"Phone: {company['phone']}" if company.get('phone') else '',
        f"Email: {company['email']}" if company.get('email') else '',
    ) if x)
    if contact:
        elements.append(_p(contact, styles['CenterSmall']))
    elements.append(_p(title, styles['DocTitle']))
    elements.append(HRFlowable(width='100%', thickness=0.5, color=colors.black, spaceAfter=6))
    return elements


def _meta_table(rows) -> Table:
    tbl = Table([[k, v] for k, v in rows], colWidths=[40 * mm, 120 * mm], hAlign='LEFT')
    tbl.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
    ]))
    return tbl


def _items_table(items: Iterable[Any], tax_percentage=None, tax_amount=None) -> Table:
    data = [['Item Description', 'Qty', 'Unit Price', 'Amount']]
    subtotal = to_decimal(0)
    for it in items:
        amount = to_decimal(it.quantity) * to_decimal(it.unit_price)
        subtotal += amount
        data.append([
            truncate(it.description, 40),
            f"{to_decimal(it.quantity).normalize():f}",
            money(it.unit_price),
            money(amount),
        ])
    total = subtotal
    extra_rows = 0
    if tax_amount and to_decimal(tax_amount) > 0:
        data.append(['', '', 'Subtotal', money(subtotal)])
        data.append(['', '', f"Tax ({to_decimal(tax_percentage).normalize():f}%)", money(tax_amount)])
        total = subtotal + to_decimal(tax_amount)
        extra_rows = 2
    data.append(['', '', 'Total', money(total)])

    first_summary = -1 - extra_rows
    tbl = Table(data, colWidths=[85 * mm, 20 * mm, 35 * mm, 35 * mm], repeatRows=1)
    tbl.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), HEADER_FILL),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('GRID', (0, 0), (-1, first_summary - 1), 0.5, colors.grey),
        ('LINEABOVE', (2, first_summary), (-1, first_summary), 0.75, colors.black),
        ('FONTNAME', (2, -1), (-1, -1), 'Helvetica-Bold'),
        ('ALIGN', (1, 1), (-1, -1), 'RIGHT'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
    ]))
    return tbl


def _notes(notes: Optional[str], styles) -> list:
    if not notes:
        return []
    return [Spacer(1, 10), _p('Notes:', styles['Heading4']), _p(notes, styles['Normal'])]


def _build(elements: list, title: str) -> io.BytesIO:
    buf = io.BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, title=title,
                            leftMargin=18 * mm, rightMargin=18 * mm,
                            topMargin=15 * mm, bottomMargin=15 * mm)
    doc.build(elements)
    buf.seek(0)
    return buf


def sale_receipt_pdf(sale, company: Optional[Dict[str, str]] = None) -> io.BytesIO:
    styles = _styles()
    company = company or company_profile()
    elements = _header('SALES RECEIPT', styles, company)
    elements.append(_meta_table([
        ('Receipt No:', sale.id),
        ('Date:', fmt_date(sale.date)),
        ('Customer:', sale.customer),
        ('Status:', sale.status),
        ('Category:', sale.category or '-'),
    ]))
    elements.append(Spacer(1, 10))
    elements.append(_items_table(sale.items, sale.tax_percentage, sale.tax_amount))
    elements.append(Spacer(1, 14))
    elements.append(_p('Thank you for your business!', styles['CenterSmall']))
    elements.extend(_notes(sale.notes, styles))
    return _build(elements, f'Sales Receipt {sale.id}')


def invoice_pdf(invoice, company: Optional[Dict[str, str]] = None) -> io.BytesIO:
    styles = _styles()
    company = company or company_profile()
    due_days = current_app.config.get('INVOICE_DUE_DAYS', 15) if has_app_context() else 15
    due = invoice.due_date or (invoice.date + timedelta(days=due_days) if invoice.date else None)

    elements = _header('INVOICE', styles, company)
    elements.append(_meta_table([
        ('Invoice No:', invoice.id),
        ('Date:', fmt_date(invoice.date)),
        ('Due Date:', fmt_date(due)),
        ('Bill To:', invoice.customer),
        ('Status:', invoice.status),
    ]))
    elements.append(Spacer(1, 10))
    elements.append(_items_table(invoice.items, invoice.tax_percentage, invoice.tax_amount))
    elements.append(Spacer(1, 12))
    elements.append(_p('Payment Information:', styles['Heading4']))
    if company.get('bank'):
        elements.append(_p(f"Bank: {company['bank']}", styles['Normal']))
    if company.get('bank_account'):
        elements.append(_p(f"Account: {company['bank_account']}", styles['Normal']))
    elements.append(_p(f'Reference: {invoice.id}', styles['Normal']))
    elements.append(Spacer(1, 8))
    elements.append(_p('Terms & Conditions:', styles['Heading4']))
    elements.append(_p(INVOICE_TERMS.format(days=due_days), styles['Normal']))
    elements.extend(_notes(invoice.notes, styles))
    return _build(elements, f'Invoice {invoice.id}')


def purchase_pdf(purchase, company: Optional[Dict[str, str]] = None) -> io.BytesIO:
    styles = _styles()
    company = company or company_profile()
    elements = _header('PURCHASE RECORD', styles, company)
    elements.append(_meta_table([
        ('Purchase No:', purchase.id),
        ('Date:', fmt_date(purchase.date)),
        ('Supplier:', purchase.supplier),
        ('Status:', purchase.status),
        ('Category:', purchase.category or '-'),
    ]))
    elements.append(Spacer(1, 10))
    elements.append(_items_table(purchase.items))
    elements.extend(_notes(purchase.notes, styles))
    return _build(elements, f'Purchase {purchase.id}')


def purchase_order_pdf(order, company: Optional[Dict[str, str]] = None) -> io.BytesIO:
    styles = _styles()
    company = company or company_profile()
    elements = _header('PURCHASE ORDER', styles, company)
    elements.append(_meta_table([
        ('PO No:', order.id),
        ('Date:', fmt_date(order.date)),
        ('Delivery Date:', fmt_date(order.delivery_date) or '-'),
        ('Supplier:', order.supplier),
        ('Status:', order.status),
    ]))
    elements.append(Spacer(1, 10))
    elements.append(_items_table(order.items))
    elements.append(Spacer(1, 12))
    elements.append(_p('Delivery Address:', styles['Heading4']))
    elements.append(_p(company['name'], styles['Normal']))
    if company.get('address'):
        elements.append(_p(company['address'], styles['Normal']))
    elements.append(Spacer(1, 8))
    elements.append(_p('Terms & Conditions:', styles['Heading4']))
    elements.append(_p(PURCHASE_ORDER_TERMS, styles['Normal']))
    elements.extend(_notes(order.notes, styles))
    return _build(elements, f'Purchase Order {order.id}')


def journal_entry_pdf(entry, company: Optional[Dict[str, str]] = None) -> io.BytesIO:
    styles = _styles()
    company = company or company_profile()
    elements = _header('JOURNAL ENTRY', styles, company)
    elements.append(_meta_table([
        ('Entry No:', entry.id),
        ('Date:', fmt_date(entry.date)),
        ('Reference:', entry.reference or '-'),
        ('Description:', entry.description),
    ]))
    elements.append(Spacer(1, 10))
    data = [['#', 'Account', 'Description', 'Debit', 'Credit']]
    for ln in entry.lines:
        data.append([
            str(ln.line_no),
            ln.account,
            truncate(ln.description, 40),
            money(ln.debit) if to_decimal(ln.debit) else '',
            money(ln.credit) if to_decimal(ln.credit) else '',
        ])
    data.append(['', '', 'Total', money(entry.total_debit), money(entry.total_credit)])
    tbl = Table(data, colWidths=[10 * mm, 45 * mm, 60 * mm, 30 * mm, 30 * mm], repeatRows=1)
    tbl.setStyle(TableStyle([
        ('GRID', (0, 0), (-1, -2), 0.5, colors.grey),
        ('BACKGROUND', (0, 0), (-1, 0), HEADER_FILL),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTNAME', (2, -1), (-1, -1), 'Helvetica-Bold'),
        ('LINEABOVE', (2, -1), (-1, -1), 0.75, colors.black),
        ('ALIGN', (3, 1), (4, -1), 'RIGHT'),
        ('FONTSIZE', (0, 0), (-1, -1), 9),
    ]))
    elements.append(tbl)
    elements.extend(_notes(entry.notes, styles))
    return _build(elements, f'Journal Entry {entry.id}')


def _grid(head, rows) -> Table:
    tbl = Table([head] + rows, repeatRows=1)
    tbl.setStyle(TableStyle([
        ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ('BACKGROUND', (0, 0), (-1, 0), HEADER_FILL),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('ALIGN', (-1, 1), (-1, -1), 'RIGHT'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
    ]))
    return tbl


def financial_report_pdf(sales, purchases, journal_entries, start=None, end=None,
                         company: Optional[Dict[str, str]] = None) -> io.BytesIO:
    """Summary plus sales, purchases and journal tables for a period."""
    styles = _styles()
    company = company or company_profile()
    sales = list(sales)
    purchases = list(purchases)
    journal_entries = list(journal_entries)
    summary = financial_summary(sales, purchases)

    elements = _header('Financial Report', styles, company)
    period = f"Period: {fmt_date(start) or 'beginning'} - {fmt_date(end) or 'today'}"
    elements.append(_p(period, styles['Normal']))
    elements.append(Spacer(1, 8))
    elements.append(_p('Summary', styles['Heading3']))
    net_label = 'Net Profit' if summary['net'] >= 0 else 'Net Loss'
    elements.append(_meta_table([
        ('Total Revenue:', money(summary['revenue'])),
        ('Total Expenses:', money(summary['expenses'])),
        (f'{net_label}:', money(summary['net'])),
    ]))

    if sales:
        elements.append(Spacer(1, 10))
        elements.append(_p('Sales', styles['Heading3']))
        elements.append(_grid(['ID', 'Customer', 'Date', 'Status', 'Amount'], [
            [s.id, truncate(s.customer, 30), fmt_date(s.date), s.status, money(s.amount)] for s in sales
        ]))
    if purchases:
        elements.append(Spacer(1, 10))
        elements.append(_p('Purchases', styles['Heading3']))
        elements.append(_grid(['ID', 'Supplier', 'Date', 'Status', 'Amount'], [
            [p.id, truncate(p.supplier, 30), fmt_date(p.date), p.status, money(p.amount)] for p in purchases
        ]))
    if journal_entries:
        elements.append(Spacer(1, 10))
        elements.append(_p('Journal Entries', styles['Heading3']))
        tbl = _grid(['ID', 'Description', 'Date', 'Debit', 'Credit'], [
            [je.id, truncate(je.description, 40), fmt_date(je.date), money(je.total_debit), money(je.total_credit)]
            for je in journal_entries
        ])
        tbl.setStyle(TableStyle([('ALIGN', (3, 1), (4, -1), 'RIGHT')]))
        elements.append(tbl)
    return _build(elements, 'Financial Report')
