# -*- coding: utf-8 -*-
"""
API JSON: sesión, códigos HTTP por tipo de error y rutas de administración.
"""


def test_security_headers(client):
    r = client.get('/api/categories')
    assert r.headers['X-Frame-Options'] == 'DENY'
    assert r.headers['X-Content-Type-Options'] == 'nosniff'
    assert 'Referrer-Policy' in r.headers


def test_me_without_session(client):
    body = client.get('/api/auth/me').get_json()
    assert body['isAuthenticated'] is False
    assert body['isLoading'] is False
    assert body['user'] is None


def test_register_login_me_logout(client):
    r = client.post('/api/auth/register', json={'username': 'haneul', 'password': 'pw123456'})
    assert r.status_code == 200

    r = client.post('/api/auth/login', json={'username': 'haneul', 'password': 'pw123456'})
    assert r.status_code == 200
    assert r.get_json()['user']['username'] == 'haneul'
    assert client.get('/api/auth/me').get_json()['isAuthenticated'] is True

    client.post('/api/auth/logout')
    assert client.get('/api/auth/me').get_json()['isAuthenticated'] is False


def test_bad_credentials(client, customer):
    r = client.post('/api/auth/login', json={'username': 'minji', 'password': 'nope'})
    assert r.status_code == 401


def test_catalog_reads(client, products):
    listing = client.get('/api/products').get_json()
    ids = sorted(p['id'] for p in listing['data'])
    assert ids == [1, 2, 3]

    search = client.get('/api/products/search', query_string={'q': '케이크'}).get_json()
    assert [p['id'] for p in search['data']] == [1]
    assert client.get('/api/products/search', query_string={'q': ''}).get_json()['data'] == []

    detail = client.get('/api/products/2').get_json()
    assert detail['data']['isOutOfStock'] is True
    assert client.get('/api/products/999').status_code == 404


def test_cart_add_requires_login(client, products):
    r = client.post('/api/cart/add', json={'product_id': 1, 'quantity': 1})
    assert r.status_code == 401
    assert r.get_json()['toast']['description'] == '장바구니를 이용하려면 로그인해주세요.'


def test_cart_add_over_stock_is_400(client, customer, products, login):
    login('minji')
    r = client.post('/api/cart/add', json={'product_id': 1, 'quantity': 3})

    assert r.status_code == 400
    assert r.get_json()['toast']['title'] == '재고가 부족합니다'
    assert client.get('/api/cart').get_json()['data']['item_count'] == 0


def test_cart_flow(client, customer, products, login):
    login('minji')
    item = client.post('/api/cart/add', json={'product_id': 3, 'quantity': 1}).get_json()['data']

    assert client.patch(f"/api/cart/{item['id']}", json={'quantity': 4}).status_code == 200
    assert client.get('/api/cart').get_json()['data']['item_count'] == 4
    assert client.delete('/api/cart/3').status_code == 200
    assert client.get('/api/cart').get_json()['data']['items'] == []


def test_checkout_and_order_reads(client, customer, other_customer, products, login):
    login('minji')
    client.post('/api/cart/add', json={'product_id': 1, 'quantity': 1})

    r = client.post('/api/orders', json={'shipping_address': '부산', 'payment_method': 'card'})
    assert r.status_code == 200
    order_id = r.get_json()['data']['id']

    orders = client.get('/api/orders').get_json()['data']
    assert [o['id'] for o in orders] == [order_id]
    assert client.get(f'/api/orders/{order_id}').status_code == 200

    client.post('/api/auth/logout')
    login('jisoo')
    assert client.get(f'/api/orders/{order_id}').status_code == 403


def test_admin_routes_are_gated(client, customer, admin, products, login):
    login('minji')
    assert client.patch('/api/orders/1/status', json={'status': 'shipped'}).status_code == 403
    assert client.get('/api/delivery-tracking').status_code == 403
    assert client.post('/api/admin/login', json={'username': 'minji', 'password': 'secret123'}).status_code == 401
    assert client.get('/api/admin/status').get_json() == {'isAdmin': False}


def test_admin_updates_order_and_tracking(client, container, customer, admin, products, login):
    order = container.order_service.place_order(customer, items=[{'product_id': 3, 'quantity': 1}])['data']

    r = client.post('/api/admin/login', json={'username': 'admin', 'password': 'admin1234'})
    assert r.get_json() == {'ok': True, 'isAdmin': True}
    login('admin', 'admin1234')

    assert client.patch(f"/api/orders/{order['id']}/status", json={'status': 'shipped'}).status_code == 200
    created = client.post('/api/delivery-tracking', json={'order_id': order['id'], 'courier': '우체국'})
    assert created.status_code == 200
    tracking_id = created.get_json()['data']['id']
    assert client.patch(f'/api/delivery-tracking/{tracking_id}', json={'status': 'delivered'}).status_code == 200

    tracking = client.get(f"/api/delivery-tracking/{order['id']}").get_json()['data']
    assert tracking['status_text'] == '배송 완료'


def test_notifications_endpoints(client, container, customer, other_customer, login):
    container.notification_service.create_system_notification(customer.id, '공지', '내용')
    login('minji')

    body = client.get(f'/api/notifications/user/{customer.id}').get_json()
    assert body['data']['unread_count'] == 1
    assert client.get(f'/api/notifications/user/{other_customer.id}').status_code == 403

    assert client.patch(f'/api/notifications/user/{customer.id}/read-all').status_code == 200
    body = client.get(f'/api/notifications/user/{customer.id}').get_json()
    assert body['data']['unread_count'] == 0


def test_review_endpoints(client, container, customer, products, login):
    login('minji')
    r = client.post('/api/products/1/reviews', json={'rating': 5, 'content': '최고'})
    assert r.status_code == 403

    container.order_service.place_order(customer, items=[{'product_id': 1, 'quantity': 1}])
    r = client.post('/api/products/1/reviews', json={'rating': 5, 'content': '최고'})
    assert r.status_code == 200
    review_id = r.get_json()['data']['id']

    assert client.post('/api/products/1/reviews', json={'rating': 4, 'content': '또'}).status_code == 400
    assert client.patch(f'/api/reviews/{review_id}', json={'content': '정말 최고'}).status_code == 200
    assert client.get('/api/products/1/reviews').get_json()['data']['total_reviews'] == 1
    assert client.delete(f'/api/reviews/{review_id}').status_code == 200


def test_favorite_and_refund_endpoints(client, container, customer, products, login):
    order = container.order_service.place_order(customer, items=[{'product_id': 3, 'quantity': 1}])['data']
    login('minji')

    toggled = client.post('/api/favorites/toggle', json={'product_id': 3}).get_json()
    assert toggled['data']['is_favorite'] is True
    assert [f['product_id'] for f in client.get('/api/favorites').get_json()['data']] == [3]

    r = client.post('/api/refund-requests', json={'order_id': order['id'], 'reason': '변심'})
    assert r.status_code == 200
    assert client.post('/api/refund-requests', json={'order_id': order['id'], 'reason': '변심'}).status_code == 400
    assert client.get(f"/api/refund-requests/check/{order['id']}").get_json()['data']['exists'] is True
    assert len(client.get(f'/api/refund-requests/user/{customer.id}').get_json()['data']) == 1


def test_pending_mutation_is_409(client, container, customer, products, login):
    login('minji')
    container.mutation_tracker.begin('create_order', customer.id)
    try:
        r = client.post('/api/orders', json={'items': [{'product_id': 3, 'quantity': 1}]})
    finally:
        container.mutation_tracker.end('create_order', customer.id)

    assert r.status_code == 409
    assert r.get_json()['toast']['title'] == '처리 중입니다'


def test_malformed_order_items_are_400(client, customer, products, login):
    login('minji')
    for items in ([1], 'cake', {'product_id': 1}):
        r = client.post('/api/orders', json={'items': items})
        assert r.status_code == 400
        assert r.get_json()['toast']['description'] == '주문 항목이 올바르지 않습니다.'


def test_cart_add_rejects_non_numeric_quantity(client, customer, products, login):
    login('minji')
    r = client.post('/api/cart/add', json={'product_id': 3, 'quantity': 'abc'})
    assert r.status_code == 400
    assert r.get_json()['error'] == 'validation'
    assert client.get('/api/cart').get_json()['data']['item_count'] == 0

    r = client.post('/api/cart/add', json={'product_id': 3})
    assert r.status_code == 200
    assert client.get('/api/cart').get_json()['data']['item_count'] == 1
