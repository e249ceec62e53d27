import io

from pos_system.services import SpoolPrinter

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 16


def _seed(client):
    r = client.post('/api/categories', json={'name': 'Dairy'})
    assert r.status_code == 201
    milk = client.post('/api/items', json={'name': 'Milk', 'price': '2.50', 'category': 'Dairy', 'unit': 'liter'})
    cheese = client.post('/api/items', json={'name': 'Cheese', 'price': 4, 'category': 'Dairy', 'unit': 'kg'})
    return milk.get_json()['item'], cheese.get_json()['item']


def _sell(client, item_id, quantity=1, customer=None):
    client.post('/api/sale/items', json={'item_id': item_id, 'quantity': quantity})
    if customer:
        client.post('/api/sale/customer', json={'customerName': customer})
    return client.post('/api/sale/complete').get_json()['sale']


def test_options(client):
    data = client.get('/api/options').get_json()
    assert data['ok']
    assert 'piece' in data['units']
    assert 'PKR' in data['currencies']
    assert 'layout10' in data['layouts']


def test_security_headers(client):
    r = client.get('/api/options')
    assert r.headers['X-Content-Type-Options'] == 'nosniff'


def test_catalog_crud(client):
    milk, cheese = _seed(client)
    assert (milk['index'], cheese['index']) == (1, 2)

    r = client.put(f"/api/items/{cheese['id']}", json={'price': '5'})
    assert r.get_json()['item']['price'] == 5.0

    r = client.get('/api/items?q=mil')
    assert [i['name'] for i in r.get_json()['items']] == ['Milk']

    r = client.delete(f"/api/items/{milk['id']}?confirm=1")
    assert r.status_code == 200
    items = client.get('/api/items').get_json()['items']
    assert [(i['name'], i['index']) for i in items] == [('Cheese', 1)]


def test_validation_error_maps_to_400(client):
    _seed(client)
    r = client.post('/api/items', json={'name': 'Bad', 'price': 'abc', 'category': 'Dairy'})
    assert r.status_code == 400
    assert r.get_json()['ok'] is False
    assert r.get_json()['error']


def test_missing_confirmation_maps_to_409(client):
    milk, _ = _seed(client)
    r = client.delete(f"/api/items/{milk['id']}")
    assert r.status_code == 409
    assert r.get_json()['confirm'] is True
    assert len(client.get('/api/items').get_json()['items']) == 2


def test_category_in_use_cannot_be_deleted(client):
    _seed(client)
    category = client.get('/api/categories').get_json()['categories'][0]
    r = client.delete(f"/api/categories/{category['id']}", json={'confirm': True})
    assert r.status_code == 400
    assert len(client.get('/api/categories').get_json()['categories']) == 1


def test_not_found_maps_to_404(client):
    r = client.put('/api/categories/nope', json={'name': 'X'})
    assert r.status_code == 404
    assert client.get('/receipt/nope').status_code == 404


def test_sale_flow(client):
    milk, _ = _seed(client)

    r = client.post('/api/sale/lookup', json={'term': '1'})
    assert r.get_json()['item']['name'] == 'Milk'

    client.post('/api/sale/items', json={'term': 'milk', 'quantity': 2})
    r = client.post('/api/sale/items', json={'item_id': milk['id'], 'quantity': 1})
    sale = r.get_json()['sale']
    assert len(sale['items']) == 1
    assert sale['items'][0]['quantity'] == 3
    assert sale['total'] == 7.5

    r = client.get('/api/sale/suggestions?q=ch')
    assert [i['name'] for i in r.get_json()['items']] == ['Cheese']

    r = client.get('/api/sale/receipt')
    assert r.mimetype == 'text/html'
    assert 'CASH SALE INVOICE' in r.get_data(as_text=True)

    r = client.post('/api/sale/complete')
    data = r.get_json()
    assert data['sale']['total'] == 7.5
    assert data['invoiceNo'] == 'INV-' + data['sale']['id'][-4:]

    assert client.get('/api/sale').get_json()['sale']['items'] == []
    assert len(client.get('/api/sales').get_json()['sales']) == 1


def test_complete_empty_sale_is_noop(client):
    r = client.post('/api/sale/complete')
    assert r.get_json() == {'ok': True, 'sale': None}
    assert client.get('/api/sales').get_json()['sales'] == []


def test_line_quantity_and_removal(client):
    milk, cheese = _seed(client)
    client.post('/api/sale/items', json={'item_id': milk['id']})
    client.post('/api/sale/items', json={'item_id': cheese['id']})

    r = client.put(f"/api/sale/items/{milk['id']}", json={'quantity': 0})
    assert [l['name'] for l in r.get_json()['sale']['items']] == ['Cheese']

    r = client.delete(f"/api/sale/items/{cheese['id']}")
    assert r.get_json()['sale']['items'] == []


def test_edit_existing_sale(client):
    milk, cheese = _seed(client)
    original = _sell(client, milk['id'], 1, customer='Ana')

    r = client.post(f"/api/sales/{original['id']}/edit")
    assert r.get_json()['editSaleId'] == original['id']

    state = client.get('/api/sale').get_json()['sale']
    assert state['editingSaleId'] == original['id']
    assert state['customerName'] == 'Ana'

    client.post('/api/sale/items', json={'item_id': cheese['id'], 'quantity': 1})
    edited = client.post('/api/sale/complete').get_json()['sale']

    sales = client.get('/api/sales').get_json()['sales']
    assert len(sales) == 1
    assert edited['id'] == original['id']
    assert sales[0]['total'] == 6.5


def test_edit_via_query_parameter(client):
    milk, _ = _seed(client)
    original = _sell(client, milk['id'], 2)
    state = client.get(f"/api/sale?editSale={original['id']}").get_json()['sale']
    assert state['editingSaleId'] == original['id']
    assert state['items'][0]['quantity'] == 2


def test_sales_search_and_delete(client):
    milk, _ = _seed(client)
    sale = _sell(client, milk['id'], customer='Ana Perez')
    _sell(client, milk['id'], customer='Bob')

    found = client.get('/api/sales?q=perez').get_json()['sales']
    assert [s['id'] for s in found] == [sale['id']]

    assert client.delete(f"/api/sales/{sale['id']}").status_code == 409
    assert client.delete(f"/api/sales/{sale['id']}?confirm=1").status_code == 200
    assert client.get(f"/api/sales/{sale['id']}").status_code == 404


def test_receipt_page_and_autoprint(client):
    milk, _ = _seed(client)
    sale = _sell(client, milk['id'])

    page = client.get(f"/receipt/{sale['id']}").get_data(as_text=True)
    assert 'INV-' + sale['id'][-4:] in page

    autoprint = client.get(f"/receipt/{sale['id']}?autoprint=1").get_data(as_text=True)
    assert 'iframe' in autoprint
    assert '.print()' in autoprint


def test_print_with_frame_printer(client, monkeypatch):
    monkeypatch.delenv('POS_PRINT_SPOOL', raising=False)
    milk, _ = _seed(client)
    sale = _sell(client, milk['id'])
    data = client.post(f"/api/sales/{sale['id']}/print").get_json()
    assert data['ok'] is True
    assert 'iframe' in data['page']


def test_print_with_spool_printer(client, container, tmp_path):
    container._printer = SpoolPrinter(str(tmp_path / 'spool'), cleanup_delay=60)
    milk, _ = _seed(client)
    sale = _sell(client, milk['id'])

    data = client.post(f"/api/sales/{sale['id']}/print").get_json()
    assert data == {'ok': True, 'spooled': True}
    assert len(list((tmp_path / 'spool').iterdir())) == 1


def test_settings_roundtrip_and_reset(client):
    r = client.post('/api/settings', json={'businessName': 'Corner Shop', 'currency': 'USD'})
    assert r.get_json()['settings']['currency'] == 'USD'
    assert client.get('/api/settings').get_json()['settings']['businessName'] == 'Corner Shop'

    assert client.post('/api/settings/reset').status_code == 409
    r = client.post('/api/settings/reset?confirm=1')
    assert r.get_json()['settings']['businessName'] == ''
    assert r.get_json()['settings']['currency'] == 'PKR'


def test_settings_reject_unknown_layout(client):
    r = client.post('/api/settings', json={'receiptLayout': 'layout42'})
    assert r.status_code == 400


def test_image_upload(client):
    r = client.post(
        '/api/settings/images/logo',
        data={'file': (io.BytesIO(PNG_BYTES), 'logo.png', 'image/png')},
        content_type='multipart/form-data',
    )
    data = r.get_json()
    assert data['ok'] is True
    assert data['dataUrl'].startswith('data:image/png;base64,')

    r = client.post(
        '/api/settings/images/logo',
        data={'file': (io.BytesIO(b'plain text'), 'notes.txt', 'text/plain')},
        content_type='multipart/form-data',
    )
    assert r.status_code == 400


def test_mutation_without_csrf_token_is_rejected(client, anonymous_client):
    client.post('/api/settings', json={'businessName': 'Corner Shop'})
    token = anonymous_client.environ_base.pop('HTTP_X_CSRF_TOKEN')

    r = anonymous_client.post(
        '/api/settings/reset',
        data={'confirm': '1'},
        headers={'Origin': 'http://evil.example'},
    )
    assert r.status_code == 403
    assert r.get_json()['ok'] is False

    r = anonymous_client.post('/api/settings/reset', data={'confirm': '1', 'csrf_token': 'wrong'})
    assert r.status_code == 403
    assert anonymous_client.get('/api/settings').get_json()['settings']['businessName'] == 'Corner Shop'

    r = anonymous_client.post('/api/settings/reset', data={'confirm': '1', 'csrf_token': token})
    assert r.status_code == 200
    assert r.get_json()['settings']['businessName'] == ''


def test_csrf_token_accepted_in_json_body(anonymous_client):
    token = anonymous_client.get('/api/csrf').get_json()['csrf_token']
    assert anonymous_client.post('/api/categories', json={'name': 'Dairy'}).status_code == 403

    r = anonymous_client.post('/api/categories', json={'name': 'Dairy', 'csrf_token': token})
    assert r.status_code == 201
    assert anonymous_client.get('/api/categories').status_code == 200


def test_non_string_fields_do_not_crash(client):
    r = client.post('/api/categories', json={'name': 5})
    assert r.status_code == 201
    assert r.get_json()['category']['name'] == '5'

    r = client.post('/api/items', json={'name': 'Milk', 'price': 2, 'category': '5', 'unit': 3})
    assert r.status_code == 400
    assert r.get_json()['ok'] is False

    r = client.post('/api/sale/customer', json={'customerName': 7})
    assert r.status_code == 200
    assert r.get_json()['sale']['customerName'] == '7'


def test_rename_unknown_category_is_404(client):
    _seed(client)
    r = client.put('/api/categories/does-not-exist', json={'name': 'Dairy'})
    assert r.status_code == 404
