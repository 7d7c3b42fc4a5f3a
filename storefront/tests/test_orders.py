# -*- coding: utf-8 -*-
"""
Pedidos: verificación de stock, descuento, carrito vacío y notificación.
"""
import threading

import pytest

from storefront.performance_logger import get_function_stats, reset_stats
from storefront.repositories.product_repository import InsufficientStockError


def test_place_order_from_cart(container, customer, products):
    container.cart_service.add_item(customer, 1, 2)
    container.cart_service.add_item(customer, 3, 1)

    result = container.order_service.place_order(customer, shipping_address='서울시 강남구', payment_method='card')

    assert result['ok']
    order = result['data']
    assert result['toast'] == {
        'title': '주문이 완료되었습니다',
        'description': f"주문번호: {order['id']}",
        'variant': 'default',
    }
    assert order['status'] == 'pending'
    assert order['total_amount'] == 2 * 32000 + 5000
    assert container.product_repo.get_product(1)['stock'] == 0
    assert container.product_repo.get_product(3)['stock'] is None
    assert container.cart_repo.get_items(customer.id) == []


def test_order_sends_pending_notification(container, customer, products):
    container.order_service.place_order(customer, items=[{'product_id': 3, 'quantity': 1}])

    notifications = container.notification_service.get_notifications(customer.id).data['notifications']
    assert len(notifications) == 1
    assert notifications[0]['message'] == '주문이 접수되었습니다'
    assert notifications[0]['related_type'] == 'order'


def test_insufficient_stock_rejects_whole_order(container, customer, products):
    result = container.order_service.place_order(customer, items=[
        {'product_id': 3, 'quantity': 1},
        {'product_id': 1, 'quantity': 5},
    ])

    assert result['error'] == 'validation'
    assert result['toast']['title'] == '재고가 부족합니다'
    assert result['toast']['description'] == '딸기 케이크의 재고가 부족합니다. (요청: 5개, 재고: 2개)'
    assert container.order_repo.get_all() == []
    assert container.product_repo.get_product(1)['stock'] == 2


def test_missing_and_unavailable_products(container, customer, products):
    missing = container.order_service.place_order(customer, items=[{'product_id': 999, 'quantity': 1}])
    retired = container.order_service.place_order(customer, items=[{'product_id': 4, 'quantity': 1}])

    assert missing['error'] == 'not_found'
    assert '상품 ID: 999' in missing['toast']['description']
    assert retired['toast']['description'] == '단종는 현재 판매 중단된 상품입니다.'


def test_empty_order(container, customer, products):
    result = container.order_service.place_order(customer)
    assert result['error'] == 'validation'


def test_anonymous_order(container, products):
    result = container.order_service.place_order(None, items=[{'product_id': 3, 'quantity': 1}])
    assert result['error'] == 'auth_required'
    assert result['toast']['description'] == '주문하려면 먼저 로그인해 주세요.'


def test_order_not_configured(offline_container):
    from storefront.models import User
    result = offline_container.order_service.place_order(User(id=1, username='x'), items=[])
    assert result['error'] == 'not_configured'


def test_failed_create_restores_stock(container, customer, products, monkeypatch, capsys):
    def broken(data):
        raise OSError('escritura fallida')

    monkeypatch.setattr(container.order_repo, 'create_order', broken)
    container.cart_service.add_item(customer, 1, 1)

    result = container.order_service.place_order(customer)

    assert result['error'] == 'remote'
    assert result['toast']['title'] == '주문 실패'
    assert '[ERROR PEDIDO]' in capsys.readouterr().out
    assert container.product_repo.get_product(1)['stock'] == 2
    assert len(container.cart_repo.get_items(customer.id)) == 1


def test_orders_list_and_product_stock_refresh(container, customer, products):
    service = container.order_service
    assert service.get_user_orders(customer).data == []
    assert container.product_service.fetch_product(1).data['stock'] == 2

    service.place_order(customer, items=[{'product_id': 1, 'quantity': 1}])

    assert len(service.get_user_orders(customer).data) == 1
    assert container.product_service.fetch_product(1).data['stock'] == 1


def test_update_status_notifies_customer(container, customer, products):
    order = container.order_service.place_order(customer, items=[{'product_id': 3, 'quantity': 1}])['data']

    result = container.order_service.update_status(order['id'], 'shipped')

    assert result['ok']
    assert container.order_service.get_order(order['id']).data['status'] == 'shipped'
    messages = [n['message'] for n in
                container.notification_service.get_notifications(customer.id).data['notifications']]
    assert '주문이 배송되었습니다' in messages


def test_update_status_validation(container, customer, products):
    assert container.order_service.update_status(1, 'teleported')['error'] == 'validation'
    assert container.order_service.update_status(404, 'shipped')['error'] == 'not_found'


def test_place_order_is_profiled(container, customer, products):
    reset_stats()
    container.order_service.place_order(customer, items=[{'product_id': 3, 'quantity': 1}])
    assert get_function_stats()['Crear pedido']['calls'] == 1


@pytest.mark.parametrize('items', [[1], ['cake'], {'product_id': 1, 'quantity': 1}, 'cake', [{'product_id': 'x'}]])
def test_malformed_items_are_rejected(container, customer, products, items):
    result = container.order_service.place_order(customer, items=items)

    assert result['error'] == 'validation'
    assert result['toast']['description'] == '주문 항목이 올바르지 않습니다.'
    assert container.order_repo.get_all() == []


def test_lines_of_same_product_are_summed(container, customer, products):
    result = container.order_service.place_order(customer, items=[
        {'product_id': 1, 'quantity': 2},
        {'product_id': 1, 'quantity': 2},
    ])

    assert result['error'] == 'validation'
    assert result['toast']['description'] == '딸기 케이크의 재고가 부족합니다. (요청: 4개, 재고: 2개)'
    assert container.product_repo.get_product(1)['stock'] == 2
    assert container.order_repo.get_all() == []


def test_stock_taken_after_first_check_rejects_order(container, customer, products, monkeypatch):
    service = container.order_service
    original = service.check_stock
    calls = []

    def check_then_sell_out(items):
        checked = original(items)
        if not calls:
            # Otro pedido se lleva el stock entre las dos verificaciones
            container.product_repo.decrement_stock(1, 2)
        calls.append(1)
        return checked

    monkeypatch.setattr(service, 'check_stock', check_then_sell_out)
    result = service.place_order(customer, items=[{'product_id': 1, 'quantity': 1}])

    assert len(calls) == 2
    assert result['error'] == 'validation'
    assert result['toast']['title'] == '재고가 부족합니다'
    assert container.product_repo.get_product(1)['stock'] == 0
    assert container.order_repo.get_all() == []


def test_concurrent_orders_never_oversell(container, customer, other_customer, products):
    service = container.order_service
    barrier = threading.Barrier(2)
    results = []

    def buy(user):
        barrier.wait(5)
        results.append(service.place_order(user, items=[{'product_id': 1, 'quantity': 2}]))

    threads = [threading.Thread(target=buy, args=(u,)) for u in (customer, other_customer)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)

    assert sorted(r['ok'] for r in results) == [False, True]
    assert container.product_repo.get_product(1)['stock'] == 0
    assert len(container.order_repo.get_all()) == 1


def test_decrement_below_zero_raises(container, products):
    with pytest.raises(InsufficientStockError):
        container.product_repo.decrement_stock(1, 3)
    assert container.product_repo.get_product(1)['stock'] == 2
    assert container.product_repo.decrement_stock(3, 100) is None


def test_unknown_stored_status_is_kept(container, customer):
    stored = container.order_repo.create_order({'user_id': customer.id, 'status': 'on_hold', 'items': []})

    order = container.order_service.get_order(stored['id']).data

    assert order['status'] == 'on_hold'
