from decimal import Decimal

import pytest

from extensions import db
from models import Invoice, JournalEntry, Purchase, PurchaseOrder, Sale


def _items(*rows):
    data = {}
    for i, (desc, qty, price) in enumerate(rows):
        data[f'items-{i}-description'] = desc
        data[f'items-{i}-quantity'] = str(qty)
        data[f'items-{i}-unit_price'] = str(price)
    return data


def test_create_list_edit_delete_sale(authed_client, test_app):
    data = {'customer': 'Acme Corp', 'date': '2024-03-05', 'status': 'Paid', 'category': 'Services',
            'tax_percentage': '10', 'notes': ''}
    data.update(_items(('Consulting', 2, '150'), ('Setup', 1, '100')))
    r = authed_client.post('/sales/new', data=data)
    assert r.status_code == 302

    with test_app.app_context():
        sale = Sale.query.one()
        sale_id = sale.id
        assert sale.amount == Decimal('440.00')
        assert len(sale.items) == 2
        assert sale.journal_entry_id is not None

    listing = authed_client.get('/sales/?q=Acme')
    assert sale_id.encode() in listing.data
    assert authed_client.get('/sales/?status=Pending').data.count(sale_id.encode()) == 0

    form_page = authed_client.get(f'/sales/{sale_id}/edit')
    assert form_page.status_code == 200
    assert b'Consulting' in form_page.data

    data['status'] = 'Pending'
    data.update(_items(('Consulting', 1, '150')))
    data.pop('items-1-description')
    data.pop('items-1-quantity')
    data.pop('items-1-unit_price')
    r = authed_client.post(f'/sales/{sale_id}/edit', data=data)
    assert r.status_code == 302
    with test_app.app_context():
        sale = db.session.get(Sale, sale_id)
        assert sale.status == 'Pending'
        assert sale.amount == Decimal('165.00')
        assert len(sale.items) == 1

    pdf = authed_client.get(f'/sales/{sale_id}/pdf')
    assert pdf.status_code == 200
    assert pdf.data.startswith(b'%PDF')

    r = authed_client.post(f'/sales/{sale_id}/delete')
    assert r.status_code == 302
    with test_app.app_context():
        assert Sale.query.count() == 0
        assert JournalEntry.query.count() == 0


def test_sale_without_items_is_refused(authed_client, test_app):
    data = {'customer': 'Acme', 'date': '2024-03-05', 'status': 'Paid'}
    data.update(_items(('', 1, '')))
    r = authed_client.post('/sales/new', data=data)
    assert r.status_code == 200
    assert b'Add at least one item' in r.data
    with test_app.app_context():
        assert Sale.query.count() == 0


def test_purchase_crud_and_pdf(authed_client, test_app):
    data = {'supplier': 'Paper Co', 'date': '2024-03-06', 'status': 'Received', 'category': 'Office'}
    data.update(_items(('A4 paper', 10, '4.5')))
    assert authed_client.post('/purchases/new', data=data).status_code == 302
    with test_app.app_context():
        purchase = Purchase.query.one()
        assert purchase.amount == Decimal('45.00')
        purchase_id = purchase.id
    assert purchase_id.encode() in authed_client.get('/purchases/').data
    pdf = authed_client.get(f'/purchases/{purchase_id}/pdf')
    assert pdf.data.startswith(b'%PDF')
    assert authed_client.post(f'/purchases/{purchase_id}/delete').status_code == 302
    with test_app.app_context():
        assert Purchase.query.count() == 0


def test_invoice_due_date_defaults_from_invoice_date(authed_client, test_app):
    data = {'customer': 'Acme', 'date': '2024-05-01', 'due_date': '', 'status': 'Pending', 'tax_percentage': ''}
    data.update(_items(('Design work', 3, '200')))
    assert authed_client.post('/invoices/new', data=data).status_code == 302
    with test_app.app_context():
        invoice = Invoice.query.one()
        assert invoice.due_date.isoformat() == '2024-05-16'
        assert invoice.amount == Decimal('600.00')
        invoice_id = invoice.id
    pdf = authed_client.get(f'/invoices/{invoice_id}/pdf')
    assert pdf.status_code == 200
    assert pdf.data.startswith(b'%PDF')


def test_purchase_order_crud(authed_client, test_app):
    data = {'supplier': 'Widgets Ltd', 'date': '2024-05-02', 'delivery_date': '2024-05-10', 'status': 'Pending'}
    data.update(_items(('Widget', 5, '12')))
    assert authed_client.post('/purchase-orders/new', data=data).status_code == 302
    with test_app.app_context():
        order = PurchaseOrder.query.one()
        order_id = order.id
        assert order.amount == Decimal('60.00')

    data['status'] = 'Fulfilled'
    assert authed_client.post(f'/purchase-orders/{order_id}/edit', data=data).status_code == 302
    with test_app.app_context():
        assert db.session.get(PurchaseOrder, order_id).status == 'Fulfilled'
    assert authed_client.get(f'/purchase-orders/{order_id}/pdf').data.startswith(b'%PDF')
    assert authed_client.post(f'/purchase-orders/{order_id}/delete').status_code == 302
    with test_app.app_context():
        assert PurchaseOrder.query.count() == 0


def test_new_forms_render(authed_client):
    for path in ('/sales/new', '/purchases/new', '/invoices/new', '/purchase-orders/new', '/journal/new'):
        r = authed_client.get(path)
        assert r.status_code == 200, path
    # Item rows are the nested subfields, not the FormField wrapper
    assert b'name="items-0-description"' in authed_client.get('/sales/new').data
    assert b'name="lines-1-credit"' in authed_client.get('/journal/new').data


@pytest.mark.parametrize('prefix, model, header', [
    ('/sales', Sale, {'customer': 'Acme', 'date': '2024-06-01', 'status': 'Paid'}),
    ('/purchases', Purchase, {'supplier': 'Paper Co', 'date': '2024-06-01', 'status': 'Received'}),
    ('/invoices', Invoice, {'customer': 'Acme', 'date': '2024-06-01', 'status': 'Pending'}),
    ('/purchase-orders', PurchaseOrder, {'supplier': 'Widgets Ltd', 'date': '2024-06-01', 'status': 'Pending'}),
])
def test_edit_form_renders_saved_items(authed_client, test_app, prefix, model, header):
    data = dict(header)
    data.update(_items(('Blue widget', 2, '7.25')))
    assert authed_client.post(f'{prefix}/new', data=data).status_code == 302
    with test_app.app_context():
        record_id = model.query.one().id
    r = authed_client.get(f'{prefix}/{record_id}/edit')
    assert r.status_code == 200
    assert b'value="Blue widget"' in r.data
