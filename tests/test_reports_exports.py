import io
from datetime import date
from decimal import Decimal

from openpyxl import load_workbook

from services.excel_export import financial_report_xlsx
from services.formatting import fmt_date, money, truncate
from services.pdf_export import financial_report_pdf, invoice_pdf, sale_receipt_pdf
from services.records import save_invoice, save_purchase, save_sale

ITEMS = [{'description': 'A very long item description that goes past forty characters', 'quantity': 2,
          'unit_price': '50'}]


def _seed():
    save_sale({'customer': 'Acme', 'date': date(2024, 1, 10), 'status': 'Paid', 'category': 'Services',
               'notes': None, 'tax_percentage': Decimal('10')}, ITEMS)
    save_sale({'customer': 'Beta', 'date': date(2024, 2, 10), 'status': 'Pending', 'category': None,
               'notes': None, 'tax_percentage': None}, ITEMS)
    save_purchase({'supplier': 'Paper Co', 'date': date(2024, 1, 12), 'status': 'Received',
                   'category': 'Office', 'notes': None}, [{'description': 'Paper', 'quantity': 1,
                                                           'unit_price': '30'}])


def test_truncate_and_dates():
    assert truncate('x' * 50) == 'x' * 40
    assert truncate(None) == ''
    assert fmt_date(date(2024, 3, 5)) == '05/03/2024'
    assert fmt_date(None) == ''


def test_money_uses_currency_and_locale():
    assert money(Decimal('1234.5'), currency='USD', locale='en_US') == '$1,234.50'


def test_summary_tabs_render(authed_client, test_app):
    with test_app.app_context():
        _seed()
    for tab in ('summary', 'profit-loss', 'monthly'):
        r = authed_client.get(f'/reports/?tab={tab}')
        assert r.status_code == 200
    pl = authed_client.get('/reports/?tab=profit-loss').data
    assert b'Net Profit' in pl
    monthly = authed_client.get('/reports/?tab=monthly&start_date=2024-01-01&end_date=2024-01-31').data
    assert b'January 2024' in monthly
    assert b'February 2024' not in monthly


def test_report_pdf_and_xlsx_downloads(authed_client, test_app):
    with test_app.app_context():
        _seed()
    pdf = authed_client.get('/reports/pdf?start_date=2024-01-01&end_date=2024-12-31')
    assert pdf.status_code == 200
    assert pdf.mimetype == 'application/pdf'
    assert pdf.data.startswith(b'%PDF')

    xlsx = authed_client.get('/reports/xlsx')
    assert xlsx.status_code == 200
    wb = load_workbook(io.BytesIO(xlsx.data))
    assert wb.sheetnames == ['SUMMARY', 'MONTHLY', 'SALES', 'PURCHASES', 'JOURNAL']
    sales_rows = list(wb['SALES'].iter_rows(values_only=True))
    assert sales_rows[0] == ('ID', 'Customer', 'Date', 'Status', 'Category', 'Amount')
    assert sales_rows[-1][0] == 'Totals'
    assert sales_rows[-1][-1] == 210.0
    # three automatic postings: two sales and one purchase
    assert len(list(wb['JOURNAL'].iter_rows(values_only=True))) == 4


def test_xlsx_summary_values(app_ctx):
    _seed()
    from models import JournalEntry, Purchase, Sale
    buf = financial_report_xlsx(Sale.query.all(), Purchase.query.all(), JournalEntry.query.all(),
                                date(2024, 1, 1), date(2024, 12, 31))
    summary = {row[0]: row[1] for row in load_workbook(buf)['SUMMARY'].iter_rows(min_row=2, values_only=True)}
    assert summary['Total Revenue'] == 110.0
    assert summary['Total Expenses'] == 30.0
    assert summary['Net Profit'] == 80.0
    assert summary['Period start'] == '2024-01-01'


def test_document_pdfs_build(app_ctx):
    sale = save_sale({'customer': 'Acme', 'date': date(2024, 1, 10), 'status': 'Paid', 'category': None,
                      'notes': 'Thanks', 'tax_percentage': Decimal('11')}, ITEMS)
    invoice = save_invoice({'customer': 'Acme', 'date': date(2024, 1, 10), 'due_date': None,
                            'status': 'Pending', 'notes': None, 'tax_percentage': None}, ITEMS)
    for buf in (sale_receipt_pdf(sale), invoice_pdf(invoice),
                financial_report_pdf([sale], [], [sale.journal_entry], None, None)):
        data = buf.getvalue()
        assert data.startswith(b'%PDF')
        assert len(data) > 1000
