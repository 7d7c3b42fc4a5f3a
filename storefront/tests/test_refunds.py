# -*- coding: utf-8 -*-
"""
Solicitudes de reembolso: una por pedido, solo pedidos propios.
"""
import threading

import pytest

from storefront.query_cache import MutationTracker
from storefront.services.refund_service import MSG_ALREADY_REQUESTED, RefundService


@pytest.fixture
def order(container, customer, products):
    return container.order_service.place_order(customer, items=[{'product_id': 3, 'quantity': 2}])['data']


def test_create_request_marks_order(container, customer, order):
    service = container.refund_service
    assert service.check_request(order['id']).data == {'exists': False, 'request': None}

    result = service.create_request(customer, order['id'], '상품 파손', '상자가 찌그러졌어요')

    assert result['ok']
    assert result['toast']['title'] == '환불 요청 완료'
    request = result['data']
    assert request['status'] == 'pending'
    assert request['amount'] == 10000
    assert request['description'] == '상자가 찌그러졌어요'
    assert service.check_request(order['id']).data['exists'] is True
    assert container.order_service.get_order(order['id']).data['status'] == 'refund_requested'


def test_second_request_is_rejected(container, customer, order):
    container.refund_service.create_request(customer, order['id'], '변심')
    again = container.refund_service.create_request(customer, order['id'], '변심')

    assert again['error'] == 'validation'
    assert again['toast']['description'] == MSG_ALREADY_REQUESTED
    assert len(container.refund_repo.get_all()) == 1


def test_reason_is_required_before_login(container, order):
    result = container.refund_service.create_request(None, order['id'], '  ')
    assert result['toast']['title'] == '환불 사유 필요'


def test_anonymous_request(container, order):
    result = container.refund_service.create_request(None, order['id'], '변심')
    assert result['error'] == 'auth_required'
    assert result['toast']['title'] == '로그인 필요'


def test_foreign_order(container, other_customer, order):
    result = container.refund_service.create_request(other_customer, order['id'], '변심')
    assert result['error'] == 'forbidden'
    assert container.refund_repo.get_all() == []


def test_missing_order(container, customer):
    assert container.refund_service.create_request(customer, 404, '변심')['error'] == 'not_found'


def test_user_requests_include_order_summary(container, customer, order):
    service = container.refund_service
    assert service.get_user_requests(customer.id).data == []

    service.create_request(customer, order['id'], '변심')
    requests = service.get_user_requests(customer.id).data

    assert len(requests) == 1
    assert requests[0]['order']['id'] == order['id']
    assert requests[0]['order']['total_amount'] == 10000


def test_order_status_failure_keeps_request(container, customer, order, monkeypatch, capsys):
    def broken(order_id, status):
        raise OSError('bloqueado')

    monkeypatch.setattr(container.order_repo, 'update_status', broken)
    result = container.refund_service.create_request(customer, order['id'], '변심')

    assert result['ok']
    assert '[ADVERTENCIA]' in capsys.readouterr().out
    assert container.refund_repo.get_request_for_order(order['id']) is not None


class GatedOrders:
    """Repositorio de pedidos que espera a la otra petición tras leer el pedido."""

    def __init__(self, repo, barrier):
        self._repo = repo
        self._barrier = barrier

    def get_order(self, order_id):
        order = self._repo.get_order(order_id)
        self._barrier.wait(5)
        return order

    def __getattr__(self, name):
        return getattr(self._repo, name)


def test_concurrent_requests_create_one(container, customer, order):
    barrier = threading.Barrier(2)
    services = [
        RefundService(
            container.refund_repo,
            GatedOrders(container.order_repo, barrier),
            cache=container.query_cache,
            tracker=MutationTracker()
        )
        for _ in range(2)
    ]

    results = []
    threads = [
        threading.Thread(target=lambda s=s: results.append(s.create_request(customer, order['id'], '변심')))
        for s in services
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)

    assert sorted(r['ok'] for r in results) == [False, True]
    rejected = next(r for r in results if not r['ok'])
    assert rejected['toast']['description'] == MSG_ALREADY_REQUESTED
    assert len(container.refund_repo.get_all()) == 1
