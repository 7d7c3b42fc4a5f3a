# -*- coding: utf-8 -*-
"""
Seguimiento de envíos: tablas de presentación completas y registro/edición.
"""
import pytest

from storefront.models import DeliveryStatus
from storefront.services import delivery_service
from storefront.services.delivery_service import (
    DELIVERY_STATUS_COLORS,
    DELIVERY_STATUS_ICONS,
    DELIVERY_STATUS_TEXTS,
    StatusTableError,
    check_status_tables,
    get_delivery_status_color,
    get_delivery_status_icon,
    get_delivery_status_text,
)


def test_every_status_has_color_text_and_icon():
    for status in DeliveryStatus:
        assert status in DELIVERY_STATUS_COLORS
        assert status in DELIVERY_STATUS_TEXTS
        assert status in DELIVERY_STATUS_ICONS


def test_incomplete_table_fails_check(monkeypatch):
    partial = dict(DELIVERY_STATUS_ICONS)
    del partial[DeliveryStatus.RETURNED]
    monkeypatch.setattr(delivery_service, 'DELIVERY_STATUS_ICONS', partial)

    with pytest.raises(StatusTableError, match='returned'):
        check_status_tables()


def test_known_status_lookups():
    assert get_delivery_status_text('in_transit') == '배송 중'
    assert get_delivery_status_text('DELIVERED') == '배송 완료'
    assert get_delivery_status_icon('delivered') == '✅'
    assert 'green' in get_delivery_status_color('delivered')


def test_unknown_status_falls_back():
    assert get_delivery_status_text('teleported') == 'teleported'
    assert get_delivery_status_text(None) == '상태 없음'
    assert get_delivery_status_text('') == '상태 없음'
    assert get_delivery_status_icon('teleported') == '📋'
    assert get_delivery_status_color(None) == DELIVERY_STATUS_COLORS[DeliveryStatus.UNKNOWN]


@pytest.fixture
def order(container, customer):
    return container.order_repo.create_order({
        'user_id': customer.id, 'status': 'processing', 'total_amount': 5000, 'items': []
    })


def test_create_tracking_defaults_to_pending(container, order):
    result = container.delivery_service.create_tracking({
        'order_id': order['id'], 'courier': 'CJ대한통운', 'tracking_number': '1234'
    })

    assert result['ok']
    assert result['toast']['title'] == '배송 정보가 등록되었습니다'
    tracking = container.delivery_service.get_tracking(order['id']).data
    assert tracking['status'] == 'pending'
    assert tracking['status_text'] == '배송 대기'


def test_create_tracking_requires_order(container):
    assert container.delivery_service.create_tracking({})['error'] == 'validation'
    assert container.delivery_service.create_tracking({'order_id': 77})['error'] == 'not_found'


def test_update_tracking_refreshes_reads(container, order):
    created = container.delivery_service.create_tracking({'order_id': order['id']})['data']
    service = container.delivery_service
    assert service.get_tracking(order['id']).data['status'] == 'pending'

    result = service.update_tracking(created['id'], {'status': 'out_for_delivery', 'order_id': 999})

    assert result['toast']['title'] == '배송 정보가 업데이트되었습니다'
    tracking = service.get_tracking(order['id']).data
    assert tracking['status_text'] == '배송 출발'
    assert tracking['order_id'] == order['id']
    assert [t['id'] for t in service.get_all_trackings().data] == [created['id']]


def test_update_without_editable_fields(container, order):
    created = container.delivery_service.create_tracking({'order_id': order['id']})['data']
    assert container.delivery_service.update_tracking(created['id'], {'id': 5})['error'] == 'validation'


def test_update_missing_tracking(container):
    assert container.delivery_service.update_tracking(50, {'status': 'shipped'})['error'] == 'not_found'
