# -*- coding: utf-8 -*-
"""
Notificaciones: contador de no leídas, marcar leídas y mensajes de pedido.
"""
import pytest

from storefront.models import OrderStatus
from storefront.services.notification_service import (
    DEFAULT_ORDER_STATUS_MESSAGE,
    ORDER_NOTIFICATION_TITLE,
    order_status_message,
)


def _notify(container, user, n=3):
    service = container.notification_service
    for i in range(n):
        service.create_system_notification(user.id, f'공지 {i}', f'내용 {i}')


def test_unread_count(container, customer):
    _notify(container, customer)
    result = container.notification_service.get_notifications(customer.id)

    assert len(result.data['notifications']) == 3
    assert result.data['unread_count'] == 3


def test_mark_all_as_read_leaves_zero_unread(container, customer, other_customer):
    _notify(container, customer)
    _notify(container, other_customer, 1)
    service = container.notification_service
    assert service.get_notifications(customer.id).data['unread_count'] == 3

    result = service.mark_all_as_read(customer.id)

    assert result['data'] == {'updated': 3}
    assert service.get_notifications(customer.id).data['unread_count'] == 0
    assert service.get_notifications(other_customer.id).data['unread_count'] == 1


def test_mark_one_as_read(container, customer):
    _notify(container, customer, 2)
    service = container.notification_service
    first = service.get_notifications(customer.id).data['notifications'][0]

    result = service.mark_as_read(first['id'], customer)
    again = service.mark_as_read(first['id'], customer)

    assert result['data']['is_read'] is True
    assert again['ok']
    assert service.get_notifications(customer.id).data['unread_count'] == 1


def test_cannot_mark_foreign_notification(container, customer, other_customer):
    _notify(container, customer, 1)
    notification = container.notification_repo.get_notifications(customer.id)[0]

    result = container.notification_service.mark_as_read(notification['id'], other_customer)

    assert result['error'] == 'forbidden'
    assert not container.notification_repo.get_notification(notification['id'])['is_read']


def test_missing_notification(container, customer):
    assert container.notification_service.mark_as_read(404, customer)['error'] == 'not_found'


def test_create_requires_fields(container):
    result = container.notification_service.create_notification({'user_id': 1, 'title': ''})
    assert result['error'] == 'validation'


def test_create_rejects_unknown_type(container):
    result = container.notification_service.create_notification(
        {'user_id': 1, 'title': 't', 'message': 'm', 'type': 'promo'}
    )
    assert result['error'] == 'validation'


@pytest.mark.parametrize('status, message', [
    (OrderStatus.PENDING, '주문이 접수되었습니다'),
    ('processing', '주문이 처리 중입니다'),
    ('shipped', '주문이 배송되었습니다'),
    ('delivered', '주문이 배송 완료되었습니다'),
    ('cancelled', '주문이 취소되었습니다'),
    ('refund_requested', DEFAULT_ORDER_STATUS_MESSAGE),
    ('lost_in_space', DEFAULT_ORDER_STATUS_MESSAGE),
    (None, DEFAULT_ORDER_STATUS_MESSAGE),
])
def test_order_status_messages(status, message):
    assert order_status_message(status) == message


def test_order_notification_links_to_orders_tab(container, customer):
    result = container.notification_service.create_order_notification(customer.id, 'shipped', 12)
    data = result['data']

    assert data['type'] == 'order'
    assert data['title'] == ORDER_NOTIFICATION_TITLE
    assert data['related_id'] == 12
    assert data['related_url'] == '/mypage?tab=orders'


def test_comment_and_like_messages(container, customer):
    service = container.notification_service
    comment = service.create_comment_notification(customer.id, '첫 글', '지수', 7)['data']
    like = service.create_like_notification(customer.id, '첫 글', '지수', 7)['data']

    assert comment['message'] == '지수님이 "첫 글" 게시물에 댓글을 달았습니다.'
    assert like['message'] == '지수님이 "첫 글" 게시물을 좋아합니다.'
    assert comment['related_url'] == '/community/7'
