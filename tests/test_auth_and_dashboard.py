from extensions import db
from models import Settings, User


def test_pages_require_login(client):
    for path in ('/', '/sales/', '/journal/', '/reports/', '/contacts/'):
        r = client.get(path)
        assert r.status_code == 302
        assert '/login' in r.headers['Location']


def test_login_page_renders(client):
    r = client.get('/login')
    assert r.status_code == 200
    assert b'password' in r.data.lower()


def test_first_login_creates_default_admin(client, test_app):
    r = client.post('/login', data={'username': 'admin', 'password': 'admin123'})
    assert r.status_code == 302
    with test_app.app_context():
        user = User.query.filter_by(username='admin').first()
        assert user is not None
        assert user.check_password('admin123')


def test_wrong_password_is_rejected(authed_client, test_app):
    c = test_app.test_client()
    r = c.post('/login', data={'username': 'admin', 'password': 'nope'})
    assert r.status_code == 200
    assert b'Invalid username or password' in r.data


def test_dashboard_renders_for_empty_books(authed_client):
    r = authed_client.get('/')
    assert r.status_code == 200
    assert b'Revenue' in r.data
    assert b'Recent Transactions' in r.data


def test_dashboard_chart_apis(authed_client):
    r = authed_client.get('/api/dashboard/revenue-expenses?year=2024')
    assert r.status_code == 200
    body = r.get_json()
    assert body['year'] == 2024
    assert len(body['points']) == 12
    assert body['points'][0]['name'] == 'Jan'

    r = authed_client.get('/api/dashboard/cash-flow?year=2024&month=2')
    assert r.status_code == 200
    assert [w['name'] for w in r.get_json()['weeks']] == ['Week 1', 'Week 2', 'Week 3', 'Week 4']

    assert authed_client.get('/api/dashboard/cash-flow?month=13').status_code == 400


def test_settings_saved_and_used_as_company_name(authed_client, test_app):
    r = authed_client.post('/settings', data={
        'company_name': 'Corner Shop', 'email': 'shop@example.com', 'phone': '123',
        'address': '1 Main St', 'currency': 'eur', 'dark_mode': 'y',
    })
    assert r.status_code == 302
    with test_app.app_context():
        s = Settings.current()
        assert s.company_name == 'Corner Shop'
        assert s.currency == 'EUR'
        assert s.dark_mode is True
    page = authed_client.get('/settings')
    assert b'Corner Shop' in page.data
    assert b'data-bs-theme="dark"' in page.data


def test_logout(authed_client):
    r = authed_client.get('/logout')
    assert r.status_code == 302
    assert authed_client.get('/').status_code == 302
