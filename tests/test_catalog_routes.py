import csv
import io

from extensions import db
from models import Account, Category, Contact, Item


def test_contacts_tabs_and_csv_export(authed_client, test_app):
    authed_client.post('/contacts/new', data={'name': 'Acme Corp', 'email': 'ar@example.com', 'type': 'Customer',
                                              'phone': '', 'balance': '1500'}, follow_redirects=True)
    authed_client.post('/contacts/new', data={'name': 'Paper Co', 'email': '', 'type': 'Supplier',
                                              'phone': '555', 'balance': '0'}, follow_redirects=True)
    with test_app.app_context():
        assert Contact.query.count() == 2

    customers = authed_client.get('/contacts/?tab=customer').data
    assert b'Acme Corp' in customers and b'Paper Co' not in customers
    suppliers = authed_client.get('/contacts/?tab=supplier').data
    assert b'Paper Co' in suppliers and b'Acme Corp' not in suppliers

    r = authed_client.get('/contacts/export.csv')
    assert r.mimetype == 'text/csv'
    rows = list(csv.DictReader(io.StringIO(r.data.decode('utf-8'))))
    assert {row['Name'] for row in rows} == {'Acme Corp', 'Paper Co'}
    assert [row for row in rows if row['Name'] == 'Acme Corp'][0]['Balance'] == '1500.0'

    names = [c['name'] for c in authed_client.get('/contacts/api/suppliers').get_json()]
    assert names == ['Paper Co']


def test_contact_email_is_validated(authed_client, test_app):
    r = authed_client.post('/contacts/new', data={'name': 'Bad', 'email': 'not-an-email', 'type': 'Customer'})
    assert r.status_code == 200
    with test_app.app_context():
        assert Contact.query.count() == 0


def test_category_in_use_cannot_be_deleted(authed_client, test_app):
    authed_client.post('/categories/new', data={'name': 'Hardware', 'description': '', 'is_active': 'y'})
    with test_app.app_context():
        category = Category.query.filter_by(name='Hardware').one()
        category_id = category.id
        db.session.add(Item(id='ITM-TEST001', name='Hammer', category_id=category_id, unit_price=12))
        db.session.commit()

    r = authed_client.post(f'/categories/{category_id}/delete', follow_redirects=True)
    assert b'Category is used by 1 item(s)' in r.data
    with test_app.app_context():
        assert db.session.get(Category, category_id) is not None
        db.session.delete(db.session.get(Item, 'ITM-TEST001'))
        db.session.commit()

    authed_client.post(f'/categories/{category_id}/delete')
    with test_app.app_context():
        assert db.session.get(Category, category_id) is None


def test_duplicate_category_name_is_refused(authed_client, test_app):
    authed_client.post('/categories/new', data={'name': 'Hardware', 'is_active': 'y'})
    r = authed_client.post('/categories/new', data={'name': 'hardware', 'is_active': 'y'})
    assert b'already exists' in r.data
    with test_app.app_context():
        assert Category.query.count() == 1


def test_categories_api_merges_transaction_categories(authed_client):
    authed_client.post('/categories/new', data={'name': 'Hardware', 'is_active': 'y'})
    authed_client.post('/journal/new', data={
        'date': '2024-04-01', 'description': 'Paint', 'category': 'Maintenance',
        'lines-0-account': 'Repairs', 'lines-0-description': 'paint', 'lines-0-debit': '20', 'lines-0-credit': '',
        'lines-1-account': 'Cash', 'lines-1-description': 'paint', 'lines-1-debit': '', 'lines-1-credit': '20',
    })
    assert authed_client.get('/categories/api/categories').get_json() == ['Hardware', 'Maintenance']


def test_item_crud_with_category_filter(authed_client, test_app):
    authed_client.post('/categories/new', data={'name': 'Tools', 'is_active': 'y'})
    with test_app.app_context():
        category_id = Category.query.one().id
    r = authed_client.post('/items/new', data={'name': 'Wrench', 'description': 'Steel', 'category_id': category_id,
                                               'unit_price': '15.50', 'is_active': 'y'}, follow_redirects=True)
    assert r.status_code == 200
    authed_client.post('/items/new', data={'name': 'Consulting hour', 'category_id': '', 'unit_price': '80',
                                           'is_active': 'y'}, follow_redirects=True)
    page = authed_client.get(f'/items/?category={category_id}').data
    assert b'<td>Wrench</td>' in page and b'Consulting hour' not in page

    api = authed_client.get('/items/api/items?q=wren').get_json()
    assert api[0]['name'] == 'Wrench'
    assert api[0]['unit_price'] == 15.5
    assert api[0]['category'] == 'Tools'

    r = authed_client.post('/items/new', data={'name': 'Ghost', 'category_id': 'CAT-MISSING', 'unit_price': '1'})
    assert r.status_code == 200
    with test_app.app_context():
        assert Item.query.count() == 2


def test_accounts_list_and_create_by_name(authed_client, test_app):
    r = authed_client.post('/accounts/new', data={'account_code': '1500', 'account_name': 'Equipment',
                                                  'account_type': 'Asset', 'normal_balance': 'Debit'})
    assert r.status_code == 302
    assert b'Equipment' in authed_client.get('/accounts/').data

    r = authed_client.post('/accounts/api/accounts', json={'name': 'Travel Expense'})
    assert r.status_code == 201
    body = r.get_json()
    assert body['created'] is True
    assert body['code'] == '5900'
    assert body['type'] == 'Expense'

    again = authed_client.post('/accounts/api/accounts', json={'name': 'travel expense'})
    assert again.status_code == 200
    assert again.get_json()['created'] is False

    assert authed_client.post('/accounts/api/accounts', json={'name': ''}).status_code == 400
    codes = [a['code'] for a in authed_client.get('/accounts/api/accounts').get_json()]
    assert codes == ['1500', '5900']
    with test_app.app_context():
        assert Account.query.filter_by(account_name='Travel Expense').one().normal_balance == 'Debit'
