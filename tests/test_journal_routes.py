from datetime import date
from decimal import Decimal

from extensions import db
from models import JournalEntry
from services.records import save_sale


def _lines(*rows):
    data = {}
    for i, (account, desc, debit, credit) in enumerate(rows):
        data[f'lines-{i}-account'] = account
        data[f'lines-{i}-description'] = desc
        data[f'lines-{i}-debit'] = str(debit)
        data[f'lines-{i}-credit'] = str(credit)
    return data


def _entry_form(**kw):
    data = {'date': '2024-04-01', 'reference': 'R-1', 'description': 'April rent', 'category': 'Rent'}
    data.update(kw)
    return data


def test_create_balanced_entry(authed_client, test_app):
    data = _entry_form()
    data.update(_lines(('Rent Expense', 'April', '1200', ''), ('Cash', 'April', '', '1200')))
    r = authed_client.post('/journal/new', data=data)
    assert r.status_code == 302
    with test_app.app_context():
        entry = JournalEntry.query.one()
        assert entry.total_debit == entry.total_credit == Decimal('1200.00')
        assert entry.source_type is None
    assert b'April rent' in authed_client.get('/journal/').data


def test_unbalanced_entry_is_refused(authed_client, test_app):
    data = _entry_form()
    data.update(_lines(('Rent Expense', 'April', '1200', ''), ('Cash', 'April', '', '1000')))
    r = authed_client.post('/journal/new', data=data)
    assert r.status_code == 200
    assert b'must be balanced' in r.data
    with test_app.app_context():
        assert JournalEntry.query.count() == 0


def test_multi_line_entry_on_create(authed_client, test_app):
    data = _entry_form(description='Sale with tax')
    data.update(_lines(('Cash', 'a', '110', ''), ('Sales Revenue', 'b', '', '100'),
                       ('Sales Tax Payable', 'c', '', '10')))
    assert authed_client.post('/journal/new', data=data).status_code == 302
    with test_app.app_context():
        assert len(JournalEntry.query.one().lines) == 3


def test_two_line_entry_stays_two_lines_on_edit(authed_client, test_app):
    data = _entry_form()
    data.update(_lines(('Rent Expense', 'April', '500', ''), ('Cash', 'April', '', '500')))
    authed_client.post('/journal/new', data=data)
    with test_app.app_context():
        entry_id = JournalEntry.query.one().id

    page = authed_client.get(f'/journal/{entry_id}/edit')
    assert page.status_code == 200
    assert b'data-two-line="true"' in page.data

    data = _entry_form()
    data.update(_lines(('Rent Expense', 'a', '600', ''), ('Cash', 'b', '', '300'), ('Bank', 'c', '', '300')))
    r = authed_client.post(f'/journal/{entry_id}/edit', data=data)
    assert r.status_code == 200
    assert b'exactly two lines' in r.data

    data = _entry_form(description='April rent (corrected)')
    data.update(_lines(('Rent Expense', 'a', '650', ''), ('Cash', 'b', '', '650')))
    assert authed_client.post(f'/journal/{entry_id}/edit', data=data).status_code == 302
    with test_app.app_context():
        entry = db.session.get(JournalEntry, entry_id)
        assert entry.description == 'April rent (corrected)'
        assert entry.total_debit == Decimal('650.00')


def test_posted_entry_cannot_be_edited_directly(authed_client, test_app):
    with test_app.app_context():
        sale = save_sale({'customer': 'Acme', 'date': date(2024, 4, 2), 'status': 'Paid',
                          'category': None, 'notes': None, 'tax_percentage': None},
                         [{'description': 'Thing', 'quantity': 1, 'unit_price': 10}])
        entry_id = sale.journal_entry_id
    r = authed_client.get(f'/journal/{entry_id}/edit')
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/journal/')


def test_delete_entry_and_pdf(authed_client, test_app):
    data = _entry_form()
    data.update(_lines(('Rent Expense', 'April', '50', ''), ('Cash', 'April', '', '50')))
    authed_client.post('/journal/new', data=data)
    with test_app.app_context():
        entry_id = JournalEntry.query.one().id
    assert authed_client.get(f'/journal/{entry_id}/pdf').data.startswith(b'%PDF')
    assert authed_client.post(f'/journal/{entry_id}/delete').status_code == 302
    with test_app.app_context():
        assert JournalEntry.query.count() == 0


def test_auto_balance_api(authed_client):
    payload = {
        'lines': [{'account': 'Cash', 'description': '', 'debit': 0, 'credit': 0},
                  {'account': 'Sales Revenue', 'description': '', 'debit': 0, 'credit': 0}],
        'index': 0, 'field': 'debit', 'value': 250,
    }
    r = authed_client.post('/journal/api/auto-balance', json=payload)
    assert r.status_code == 200
    body = r.get_json()
    assert body['lines'][0]['debit'] == 250.0
    assert body['lines'][1]['credit'] == 250.0
    assert body['balanced'] is True
    assert body['difference'] == 0.0


def test_auto_balance_api_rejects_three_lines(authed_client):
    line = {'account': 'Cash', 'description': '', 'debit': 0, 'credit': 0}
    r = authed_client.post('/journal/api/auto-balance',
                           json={'lines': [line, line, line], 'index': 0, 'field': 'debit', 'value': 5})
    assert r.status_code == 400
    assert 'error' in r.get_json()


def test_totals_api(authed_client):
    r = authed_client.post('/journal/api/totals', json={'lines': [
        {'debit': '10', 'credit': ''}, {'debit': '', 'credit': '7.5'}]})
    body = r.get_json()
    assert body['total_debit'] == 10.0
    assert body['total_credit'] == 7.5
    assert body['balanced'] is False


def test_auto_balance_api_rejects_non_finite_value(authed_client):
    line = {'account': 'Cash', 'description': '', 'debit': 0, 'credit': 0}
    for value in ('NaN', 'Infinity', '-inf', 'abc'):
        r = authed_client.post('/journal/api/auto-balance',
                               json={'lines': [line, dict(line)], 'index': 0, 'field': 'debit', 'value': value})
        assert r.status_code == 400, value
        assert 'error' in r.get_json()

    bad_line = dict(line, credit='NaN')
    r = authed_client.post('/journal/api/auto-balance',
                           json={'lines': [line, bad_line], 'index': 0, 'field': 'debit', 'value': 5})
    assert r.status_code == 400


def test_totals_api_rejects_bad_amounts(authed_client):
    for lines in ([{'debit': 'Infinity', 'credit': ''}], [{'debit': '', 'credit': 'NaN'}], ['not a line'], 'x'):
        r = authed_client.post('/journal/api/totals', json={'lines': lines})
        assert r.status_code == 400, lines
        assert 'error' in r.get_json()


def test_unbalanced_two_line_entry_re_renders_form(authed_client, test_app):
    data = _entry_form()
    data.update(_lines(('Rent Expense', 'April', '300', ''), ('Cash', 'April', '', '299')))
    r = authed_client.post('/journal/new', data=data)
    assert r.status_code == 200
    assert b'name="lines-0-account"' in r.data
    assert b'value="Rent Expense"' in r.data
    with test_app.app_context():
        assert JournalEntry.query.count() == 0


def test_json_endpoints_are_csrf_exempt(csrf_client):
    # Exempt views reach login_required (redirect); protected views stop at the CSRF check
    for url in ('/journal/api/auto-balance', '/journal/api/totals', '/accounts/api/accounts'):
        assert csrf_client.post(url, json={}).status_code == 302, url
    assert csrf_client.post('/journal/new', data={}).status_code == 400
