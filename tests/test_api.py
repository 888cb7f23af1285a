# tests/test_api.py (HTTP surface)
import pytest
from sternkern.models import Maintenance, Tenant, Unit, User


# Small helper to reduce repetition when creating units and tenants via API
def _create_units(client, *specs):
    """specs: (house_number, rent) tuples."""
    for house_number, rent in specs:
        resp = client.post('/units', json={'house_number': house_number, 'bedrooms': 2, 'rent_amount': rent})
        assert resp.status_code == 201


def _onboard(client, name, house_number):
    resp = client.post('/tenants', json={'tenant_name': name, 'contact_number': '0711000000',
                                         'house_number': house_number})
    assert resp.status_code == 201
    return resp.json


# --- Sessions and roles ---
def test_routes_require_login(client, db_session):
    resp = client.get('/units')
    assert resp.status_code == 401
    assert resp.json == {'error': 'Login required'}
    assert client.get('/auth/me').status_code == 401


def test_login_me_logout(login_as):
    client = login_as('caretaker', username='carol')

    me = client.get('/auth/me')
    assert me.status_code == 200
    assert me.json == {'id': 1, 'username': 'carol', 'role': 'caretaker', 'contact': '0700000000',
                       'house_number': None}

    assert client.post('/auth/logout').status_code == 200
    assert client.get('/auth/me').status_code == 401


@pytest.mark.parametrize("payload, expected", [
    ({}, 400),
    ({'username': 'landlord'}, 400),
    ({'username': 'landlord', 'password': 'wrong'}, 401),
    ({'username': 'ghost', 'password': 'secret'}, 401),
])
def test_login_rejects_bad_credentials(landlord_client, payload, expected):
    assert landlord_client.post('/auth/login', json=payload).status_code == expected


@pytest.mark.parametrize("role, path, expected", [
    ('tenant', '/units', 403),
    ('tenant', '/tenants', 403),
    ('tenant', '/invoices', 200),
    ('tenant', '/payments', 200),
    ('caretaker', '/units', 200),
    ('caretaker', '/reports/export/occupancy_analysis.csv', 403),
    ('caretaker', '/admin/occupancy/drift', 403),
    ('landlord', '/reports/export/occupancy_analysis.csv', 200),
])
def test_role_capabilities(login_as, role, path, expected):
    client = login_as(role)
    assert client.get(path).status_code == expected


def test_landlord_creates_users_with_hashed_passwords(landlord_client, db_session):
    resp = landlord_client.post('/users', json={'username': 'tina', 'password': 'pw', 'role': 'tenant',
                                                'house_number': 'A1'})
    assert resp.status_code == 201
    assert 'password' not in resp.json
    assert landlord_client.post('/users', json={'username': 'tina', 'password': 'x', 'role': 'caretaker'}).status_code == 409
    assert landlord_client.post('/users', json={'username': 'tom', 'password': 'x', 'role': 'tenant'}).status_code == 400
    assert landlord_client.post('/users', json={'username': 'x', 'password': 'x', 'role': 'owner'}).status_code == 400

    stored = User.query.filter_by(username='tina').one()
    assert stored.password != 'pw'
    assert stored.house_number == 'A1'


def test_tenant_account_sees_only_its_own_unit(landlord_client, login_as, db_session):
    _create_units(landlord_client, ('A1', 25000), ('B1', 35000))
    _onboard(landlord_client, 'Alice', 'A1')
    _onboard(landlord_client, 'Bob', 'B1')
    landlord_client.post('/invoices/bulk', json={'billing_month': '2025-01'})
    for house in ('A1', 'B1'):
        landlord_client.post('/payments', json={'house_number': house, 'amount_paid': '1000',
                                                'payment_method': 'Cash', 'payment_date': '2025-01-03'})
        landlord_client.post('/maintenance', json={'house_number': house, 'description': 'Leak'})

    client = login_as('tenant', username='alice', house_number='A1')

    assert {p['house_number'] for p in client.get('/payments').json} == {'A1'}
    assert {i['house_number'] for i in client.get('/invoices').json} == {'A1'}
    assert {m['house_number'] for m in client.get('/maintenance').json} == {'A1'}
    assert [r['house_number'] for r in client.get('/reports/rent-data?as_of=2025-01-15').json] == ['A1']
    assert {a['house_number'] for a in client.get('/reports/activity').json} == {'A1'}

    other = client.post('/payments', json={'house_number': 'B1', 'amount_paid': '10', 'payment_method': 'Cash'})
    assert other.status_code == 403
    own = client.post('/payments', json={'house_number': 'A1', 'amount_paid': '10', 'payment_method': 'Cash'})
    assert own.status_code == 201
    assert client.post('/maintenance', json={'house_number': 'B1', 'description': 'x'}).status_code == 403
    bob_job = Maintenance.query.filter_by(house_number='B1').one()
    assert client.patch(f'/maintenance/{bob_job.id}', json={'status': 'Completed'}).status_code == 403
    assert client.post('/invoices/bulk', json={'billing_month': '2025-02'}).status_code == 403
    assert client.post('/invoices/mark-overdue').status_code == 403


# --- Units and tenants ---
def test_unit_crud_and_money_as_strings(landlord_client, db_session):
    _create_units(landlord_client, ('B1', '35000'), ('A1', 25000))

    units = landlord_client.get('/units').json
    assert [u['house_number'] for u in units] == ['A1', 'B1']
    assert units[0]['rent_amount'] == '25000.00'
    assert units[0]['occupancy_status'] == 'Unoccupied'

    assert landlord_client.post('/units', json={'house_number': 'A1'}).status_code == 409
    assert landlord_client.get('/units/Z9').status_code == 404
    assert landlord_client.get('/units?status=Vacant').status_code == 400

    resp = landlord_client.patch('/units/A1', json={'rent_amount': '26000'})
    assert resp.status_code == 200
    assert resp.json['rent_amount'] == '26000.00'

    bad = landlord_client.patch('/units/A1', json={'rent_amount': '999', 'occupancy_status': 'Bogus'})
    assert bad.status_code == 400
    assert landlord_client.get('/units/A1').json['rent_amount'] == '26000.00'


def test_onboard_shift_and_vacate(landlord_client, db_session):
    _create_units(landlord_client, ('A1', 25000), ('B1', 35000))
    tenant = _onboard(landlord_client, 'Alice', 'A1')

    assert [u['house_number'] for u in landlord_client.get('/units/vacant').json] == ['B1']
    # occupied units cannot take a second tenant
    assert landlord_client.post('/tenants', json={'tenant_name': 'Bob', 'house_number': 'A1'}).status_code == 409

    resp = landlord_client.post('/tenants/shift', json={'current_house_number': 'A1',
                                                        'target_house_number': 'B1'})
    assert resp.status_code == 200
    assert resp.json['id'] == tenant['id']
    assert resp.json['house_number'] == 'B1'
    statuses = {u['house_number']: u['occupancy_status'] for u in landlord_client.get('/units').json}
    assert statuses == {'A1': 'Unoccupied', 'B1': 'Occupied'}

    assert landlord_client.post('/tenants/shift', json={'current_house_number': 'A1'}).status_code == 400
    assert landlord_client.post('/tenants/shift', json={'current_house_number': 'A1',
                                                        'target_house_number': 'B1'}).status_code == 404

    resp = landlord_client.post('/tenants/vacate', json={'house_number': 'B1'})
    assert resp.status_code == 200
    assert resp.json['tenant_name'] == 'Alice'
    assert landlord_client.get('/tenants').json == []


# --- Billing ---
def test_rent_data_reflects_invoices_and_payments(landlord_client, db_session):
    _create_units(landlord_client, ('A1', 25000), ('B1', 35000), ('C1', 30000))
    _onboard(landlord_client, 'Alice', 'A1')
    _onboard(landlord_client, 'Bob', 'B1')

    resp = landlord_client.post('/invoices/bulk', json={'billing_month': '2024-12'})
    assert resp.status_code == 201
    assert resp.json['created'] == 2
    # a second run for the same month adds nothing
    assert landlord_client.post('/invoices/bulk', json={'billing_month': '2024-12'}).json['created'] == 0

    resp = landlord_client.post('/payments', json={'house_number': 'A1', 'amount_paid': '25000',
                                                   'payment_method': 'M-Pesa', 'payment_date': '2024-12-05',
                                                   'invoice_id': 'INV-202412-A1'})
    assert resp.status_code == 201
    assert resp.json['tenant_name'] == 'Alice'

    rows = landlord_client.get('/reports/rent-data?as_of=2025-01-10').json
    assert [r['house_number'] for r in rows] == ['A1', 'B1']
    alice, bob = rows
    # December's invoice keeps its amount_due; the payment is subtracted once, as the latest payment
    assert alice['previous_arrears'] == '25000.00'
    assert alice['latest_payment_method'] == 'M-Pesa'
    assert alice['balance'] == '25000.00'
    assert bob['previous_arrears'] == '35000.00'
    assert bob['latest_payment_method'] == '—'
    assert bob['balance'] == '70000.00'

    invoices = landlord_client.get('/invoices?house_number=A1').json
    assert invoices[0]['payment_status'] == 'Paid'
    assert invoices[0]['amount_due'] == '25000.00'

    resp = landlord_client.post('/invoices/mark-overdue?as_of=2025-01-10')
    assert resp.json == {'marked_overdue': 1}
    assert [i['house_number'] for i in landlord_client.get('/invoices?status=Overdue').json] == ['B1']


def test_single_invoice_and_duplicate(landlord_client, db_session):
    _create_units(landlord_client, ('A1', 25000))
    _onboard(landlord_client, 'Alice', 'A1')

    resp = landlord_client.post('/invoices', json={'house_number': 'A1', 'billing_month': '2025-01',
                                                   'water': '450.50'})
    assert resp.status_code == 201
    assert resp.json['invoice_id'] == 'INV-202501-A1'
    assert resp.json['tenant_name'] == 'Alice'
    assert resp.json['total_due'] == '25450.50'

    dup = landlord_client.post('/invoices', json={'house_number': 'A1', 'billing_month': '2025-01-20'})
    assert dup.status_code == 409
    assert 'already has an invoice' in dup.json['error']


@pytest.mark.parametrize("payload", [
    {'house_number': 'A1', 'amount_paid': '0', 'payment_method': 'Cash'},
    {'house_number': 'A1', 'amount_paid': '100', 'payment_method': 'Bitcoin'},
    {'house_number': 'A1', 'amount_paid': 'lots', 'payment_method': 'Cash'},
    {'amount_paid': '100', 'payment_method': 'Cash'},
])
def test_payment_validation(landlord_client, db_session, payload):
    resp = landlord_client.post('/payments', json=payload)
    assert resp.status_code == 400
    assert 'error' in resp.json


def test_payment_against_unknown_invoice(landlord_client, db_session):
    resp = landlord_client.post('/payments', json={'house_number': 'A1', 'amount_paid': '10',
                                                   'payment_method': 'Cash', 'invoice_id': 'INV-000000-A1'})
    assert resp.status_code == 404
    assert landlord_client.get('/payments').json == []


# --- Records ---
def test_maintenance_lifecycle(landlord_client, db_session):
    _create_units(landlord_client, ('A1', 25000))
    job = landlord_client.post('/maintenance', json={'house_number': 'A1', 'description': 'Broken window',
                                                     'cost': '1200', 'date_of_maintenance': '2025-01-03'}).json
    assert job['status'] == 'Pending'
    assert job['date_of_maintenance'] == '2025-01-03'

    assert landlord_client.patch(f"/maintenance/{job['id']}", json={'status': 'Completed'}).status_code == 200
    back = landlord_client.patch(f"/maintenance/{job['id']}", json={'status': 'Pending'})
    assert back.status_code == 400
    assert landlord_client.patch('/maintenance/999', json={'status': 'Completed'}).status_code == 404


def test_utilities_and_inventory(landlord_client, db_session):
    _create_units(landlord_client, ('A1', 25000))
    resp = landlord_client.post('/utilities', json={'house_number': 'A1', 'billing_month': '2025-01',
                                                    'electricity': '800'})
    assert resp.status_code == 201
    assert resp.json['billing_month'] == '2025-01-01'
    assert len(landlord_client.get('/utilities').json) == 1

    resp = landlord_client.post('/inventory', json={'item_name': 'Water heater', 'house_number': 'A1'})
    assert resp.status_code == 201
    assert landlord_client.post('/inventory', json={'item_name': 'Fan', 'house_number': 'Z9'}).status_code == 404
    assert [i['item_name'] for i in landlord_client.get('/inventory').json] == ['Water heater']


# --- Reports and admin ---
def test_dashboard_and_activity(landlord_client, db_session):
    _create_units(landlord_client, ('A1', 25000), ('B1', 35000), ('C1', 30000), ('D1', 20000))
    for name, house in (('Alice', 'A1'), ('Bob', 'B1'), ('Cleo', 'C1')):
        _onboard(landlord_client, name, house)
    landlord_client.post('/payments', json={'house_number': 'A1', 'amount_paid': '25000',
                                            'payment_method': 'Cash', 'payment_date': '2025-01-02'})

    summary = landlord_client.get('/reports/dashboard?as_of=2025-01-15').json
    assert summary['occupancy_rate'] == 75
    assert summary['vacant_units'] == 1
    assert summary['monthly_revenue'] == '25000.00'

    activity = landlord_client.get('/reports/activity?limit=1').json
    assert activity == [{'type': 'payment', 'title': 'Payment received', 'house_number': 'A1',
                         'amount': '25000.00', 'date': '2025-01-02'}]
    assert landlord_client.get('/reports/activity?limit=x').status_code == 400


def test_csv_export(landlord_client, db_session):
    _create_units(landlord_client, ('A1', 25000))
    landlord_client.post('/payments', json={'house_number': 'A1', 'amount_paid': '1000',
                                            'payment_method': 'Cash', 'payment_date': '2024-01-09'})

    resp = landlord_client.get('/reports/export/monthly_revenue.csv')
    assert resp.status_code == 200
    assert resp.headers['Content-Type'].startswith('text/csv')
    assert resp.headers['Content-Disposition'] == 'attachment; filename="monthly_revenue.csv"'
    assert resp.get_data(as_text=True) == 'Month,Revenue\n"2024-01",1000'

    assert landlord_client.get('/reports/export/passwords.csv').status_code == 404


def test_occupancy_drift_and_reconcile(landlord_client, db_session):
    db_session.add_all([
        Unit(house_number='A1', rent_amount=100, occupancy_status='Occupied'),
        Unit(house_number='B1', rent_amount=100, occupancy_status='Unoccupied'),
        Tenant(tenant_name='Bea', house_number='B1'),
    ])
    db_session.commit()

    drift = landlord_client.get('/admin/occupancy/drift').json
    assert [d['house_number'] for d in drift] == ['A1', 'B1']

    resp = landlord_client.post('/admin/occupancy/reconcile')
    assert resp.status_code == 200
    assert len(resp.json['reconciled']) == 2
    assert landlord_client.get('/admin/occupancy/drift').json == []


def test_unknown_route_is_json_404(landlord_client):
    resp = landlord_client.get('/nowhere')
    assert resp.status_code == 404
    assert resp.json == {'error': 'Not found'}
