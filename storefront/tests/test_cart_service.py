# -*- coding: utf-8 -*-
"""
Carrito: verificaciones de stock antes de escribir e invalidación del carrito.
"""


def test_add_within_stock(container, customer, products):
    result = container.cart_service.add_item(customer, 1, 2)

    assert result['ok']
    assert result['toast']['title'] == '장바구니에 추가되었습니다'
    assert container.cart_repo.get_items(customer.id)[0]['quantity'] == 2


def test_add_more_than_stock_is_rejected_without_writing(container, customer, products):
    result = container.cart_service.add_item(customer, 1, 3)

    assert not result['ok']
    assert result['error'] == 'validation'
    assert result['toast']['title'] == '재고가 부족합니다'
    assert result['toast']['description'] == '요청 수량: 3개, 현재 재고: 2개'
    assert result['toast']['variant'] == 'destructive'
    assert container.cart_repo.get_items(customer.id) == []


def test_out_of_stock_product_is_rejected(container, customer, products):
    result = container.cart_service.add_item(customer, 2, 1)

    assert result['error'] == 'validation'
    assert result['toast']['title'] == '품절된 상품입니다'


def test_product_without_inventory_is_never_out_of_stock(container, customer, products):
    result = container.cart_service.add_item(customer, 3, 50)
    assert result['ok']


def test_unavailable_product_is_rejected(container, customer, products):
    result = container.cart_service.add_item(customer, 4, 1)
    assert result['toast']['title'] == '상품을 사용할 수 없습니다'


def test_missing_product(container, customer, products):
    result = container.cart_service.add_item(customer, 999, 1)
    assert result['error'] == 'not_found'


def test_zero_quantity_is_rejected(container, customer, products):
    result = container.cart_service.add_item(customer, 1, 0)
    assert result['toast']['title'] == '수량을 확인해주세요'


def test_anonymous_user_gets_login_prompt(container, products):
    result = container.cart_service.add_item(None, 1, 1)

    assert result['error'] == 'auth_required'
    assert result['toast']['title'] == '로그인이 필요합니다'
    assert container.cart_repo.get_all() == []


def test_backend_not_configured(offline_container, products):
    from storefront.models import User
    user = User(id=1, username='minji')

    result = offline_container.cart_service.add_item(user, 1, 1)

    assert result['error'] == 'not_configured'
    assert offline_container.cart_repo.get_all() == []


def test_cart_read_is_refreshed_after_add(container, customer, products):
    before = container.cart_service.get_cart(customer)
    assert before.data['item_count'] == 0

    container.cart_service.add_item(customer, 3, 2)
    after = container.cart_service.get_cart(customer)

    assert after.data['item_count'] == 2
    assert after.data['cart_total'] == 10000


def test_adding_same_product_sums_quantity(container, customer, products):
    container.cart_service.add_item(customer, 3, 1)
    container.cart_service.add_item(customer, 3, 2)

    items = container.cart_repo.get_items(customer.id)
    assert len(items) == 1
    assert items[0]['quantity'] == 3


def test_update_quantity_checks_stock(container, customer, products):
    item = container.cart_service.add_item(customer, 1, 1)['data']

    rejected = container.cart_service.update_quantity(customer, item['id'], 5)
    accepted = container.cart_service.update_quantity(customer, item['id'], 2)

    assert rejected['error'] == 'validation'
    assert accepted['ok']
    assert container.cart_repo.get_item(customer.id, item['id'])['quantity'] == 2


def test_update_quantity_of_foreign_item(container, customer, other_customer, products):
    item = container.cart_service.add_item(customer, 3, 1)['data']
    result = container.cart_service.update_quantity(other_customer, item['id'], 2)
    assert result['error'] == 'not_found'


def test_remove_and_clear(container, customer, products):
    container.cart_service.add_item(customer, 1, 1)
    container.cart_service.add_item(customer, 3, 1)

    assert container.cart_service.remove_item(customer, 1)['ok']
    assert [i['product_id'] for i in container.cart_repo.get_items(customer.id)] == [3]

    assert container.cart_service.clear(customer)['data'] == {'removed': 1}
    assert container.cart_service.get_cart(customer).data['items'] == []
