"""Spreadsheet exports (pandas DataFrames written through openpyxl)."""
from __future__ import annotations

from io import BytesIO, StringIO

import pandas as pd

from services.aggregates import financial_summary, monthly_breakdown

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _num(value) -> float:
    return float(value or 0)


def _record_rows(records, party_field: str):
    return [{
        'ID': r.id,
        party_field.capitalize(): getattr(r, party_field),
        'Date': r.date,
        'Status': r.status,
        'Category': r.category or '',
        'Amount': _num(r.amount),
    } for r in records]


def financial_report_xlsx(sales, purchases, journal_entries, start=None, end=None) -> BytesIO:
    """Workbook with SUMMARY, MONTHLY, SALES, PURCHASES and JOURNAL sheets."""
    sales = list(sales)
    purchases = list(purchases)
    journal_entries = list(journal_entries)
    summary = financial_summary(sales, purchases)

    sum_df = pd.DataFrame([
        {'Metric': 'Period start', 'Value': start.isoformat() if start else ''},
        {'Metric': 'Period end', 'Value': end.isoformat() if end else ''},
        {'Metric': 'Total Revenue', 'Value': _num(summary['revenue'])},
        {'Metric': 'Total Expenses', 'Value': _num(summary['expenses'])},
        {'Metric': 'Net Profit' if summary['net'] >= 0 else 'Net Loss', 'Value': _num(summary['net'])},
        {'Metric': 'Sales', 'Value': summary['sales_count']},
        {'Metric': 'Purchases', 'Value': summary['purchases_count']},
    ])
    monthly_df = pd.DataFrame([{
        'Month': row['label'],
        'Revenue': _num(row['revenue']),
        'Expenses': _num(row['expenses']),
        'Net': _num(row['net']),
    } for row in monthly_breakdown(sales, purchases)], columns=['Month', 'Revenue', 'Expenses', 'Net'])
    sales_df = pd.DataFrame(_record_rows(sales, 'customer'),
                            columns=['ID', 'Customer', 'Date', 'Status', 'Category', 'Amount'])
    purchases_df = pd.DataFrame(_record_rows(purchases, 'supplier'),
                                columns=['ID', 'Supplier', 'Date', 'Status', 'Category', 'Amount'])
    journal_df = pd.DataFrame([{
        'ID': je.id,
        'Date': je.date,
        'Reference': je.reference or '',
        'Description': je.description,
        'Debit': _num(je.total_debit),
        'Credit': _num(je.total_credit),
    } for je in journal_entries], columns=['ID', 'Date', 'Reference', 'Description', 'Debit', 'Credit'])

    if not sales_df.empty:
        totals_row = {'ID': 'Totals', 'Amount': sales_df['Amount'].sum()}
        sales_df = pd.concat([sales_df, pd.DataFrame([totals_row])], ignore_index=True)
    if not purchases_df.empty:
        totals_row = {'ID': 'Totals', 'Amount': purchases_df['Amount'].sum()}
        purchases_df = pd.concat([purchases_df, pd.DataFrame([totals_row])], ignore_index=True)

    buf = BytesIO()
    with pd.ExcelWriter(buf, engine='openpyxl') as writer:
        sum_df.to_excel(writer, index=False, sheet_name='SUMMARY')
        monthly_df.to_excel(writer, index=False, sheet_name='MONTHLY')
        sales_df.to_excel(writer, index=False, sheet_name='SALES')
        purchases_df.to_excel(writer, index=False, sheet_name='PURCHASES')
        journal_df.to_excel(writer, index=False, sheet_name='JOURNAL')
    buf.seek(0)
    return buf


def contacts_csv(contacts) -> str:
    df = pd.DataFrame([{
        'ID': c.id,
        'Name': c.name,
        'Type': c.type,
        'Email': c.email or '',
        'Phone': c.phone or '',
        'Balance': _num(c.balance),
    } for c in contacts], columns=['ID', 'Name', 'Type', 'Email', 'Phone', 'Balance'])
    out = StringIO()
    df.to_csv(out, index=False)
    return out.getvalue()
