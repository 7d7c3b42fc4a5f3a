# ==============================================================================
# SERVICIO DE NOTIFICACIONES
# ==============================================================================
# Estado de una notificación: no leída → leída (sin vuelta atrás).
#
# Ayudantes para los tipos comunes:
#   - create_comment_notification  → "새 댓글이 달렸습니다"
#   - create_like_notification     → "좋아요를 받았습니다"
#   - create_order_notification    → "주문 상태 업데이트" + mensaje por estado
#   - create_system_notification   → título y mensaje libres
# ==============================================================================

from typing import Any, Dict, Optional

from storefront.models import Notification, NotificationType, OrderStatus, Toast, User
from storefront.query_cache import QueryResult
from storefront.repositories.interfaces import INotificationRepository
from storefront.services.base import (
    BaseService,
    ServiceError,
    fail,
    ERROR_FORBIDDEN,
    ERROR_NOT_FOUND,
    ERROR_VALIDATION,
)


# Mensaje de la notificación de pedido según el estado
ORDER_STATUS_MESSAGES = {
    OrderStatus.PENDING.value: '주문이 접수되었습니다',
    OrderStatus.PROCESSING.value: '주문이 처리 중입니다',
    OrderStatus.SHIPPED.value: '주문이 배송되었습니다',
    OrderStatus.DELIVERED.value: '주문이 배송 완료되었습니다',
    OrderStatus.CANCELLED.value: '주문이 취소되었습니다',
}
DEFAULT_ORDER_STATUS_MESSAGE = '주문 상태가 변경되었습니다'

ORDER_NOTIFICATION_TITLE = '주문 상태 업데이트'
ORDERS_TAB_URL = '/mypage?tab=orders'

NOTIFICATION_ERROR_TOAST = Toast.error('알림 오류', '알림 처리 중 오류가 발생했습니다.')


def order_status_message(status: Any) -> str:
    """Mensaje para un estado de pedido (cualquier valor desconocido → genérico)."""
    value = status.value if isinstance(status, OrderStatus) else str(status or '')
    return ORDER_STATUS_MESSAGES.get(value, DEFAULT_ORDER_STATUS_MESSAGE)


class NotificationService(BaseService):
    """
    Servicio de notificaciones.

    Responsabilidades:
    - Listar notificaciones con contador de no leídas
    - Marcar una o todas como leídas
    - Crear notificaciones (genéricas o por tipo)
    """

    def __init__(self, notification_repo: INotificationRepository, **kwargs):
        super().__init__(**kwargs)
        self.notification_repo = notification_repo

    # =========================================================================
    # LECTURAS
    # =========================================================================

    def get_notifications(self, user_id: int) -> QueryResult:
        """
        Notificaciones de un usuario.

        Returns:
            QueryResult con {notifications, unread_count}
        """
        def fetcher() -> Dict[str, Any]:
            items = [
                Notification.from_dict(n).to_dict()
                for n in self.notification_repo.get_notifications(user_id)
            ]
            return {
                'notifications': items,
                'unread_count': sum(1 for n in items if not n['is_read']),
            }

        return self._query(('notifications', user_id), fetcher)

    # =========================================================================
    # MARCAR COMO LEÍDAS
    # =========================================================================

    def mark_as_read(self, notification_id: int, user: Optional[User] = None) -> Dict[str, Any]:
        """
        Marca una notificación como leída.

        Args:
            notification_id: ID de la notificación
            user: Si se indica, debe ser el dueño de la notificación
        """
        def action():
            current = self.notification_repo.get_notification(notification_id)
            if current is None:
                raise ServiceError(ERROR_NOT_FOUND, Toast.error('알림을 찾을 수 없습니다'))
            if user is not None and current.get('user_id') != user.id:
                raise ServiceError(ERROR_FORBIDDEN, Toast.error('권한이 없습니다'))
            if current.get('is_read'):
                return current
            return self.notification_repo.mark_as_read(notification_id)

        return self._mutate(
            'mark_notification_read',
            action,
            params=lambda data: {'notification_id': notification_id, 'user_id': data.get('user_id')},
            success_toast=None,
            error_toast=NOTIFICATION_ERROR_TOAST,
            log_tag='ERROR NOTIFICACION',
            scope=notification_id
        )

    def mark_all_as_read(self, user_id: int) -> Dict[str, Any]:
        """Marca todas las notificaciones del usuario como leídas."""
        return self._mutate(
            'mark_all_notifications_read',
            lambda: {'updated': self.notification_repo.mark_all_as_read(user_id)},
            params={'user_id': user_id},
            success_toast=None,
            error_toast=NOTIFICATION_ERROR_TOAST,
            log_tag='ERROR NOTIFICACION',
            scope=user_id
        )

    # =========================================================================
    # CREACIÓN
    # =========================================================================

    def create_notification(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Crea una notificación.

        Args:
            data: user_id, type, title, message y opcionalmente
                  related_id, related_type, related_url

        Returns:
            Dict de resultado con la notificación creada
        """
        user_id = data.get('user_id')
        title = (data.get('title') or '').strip()
        message = (data.get('message') or '').strip()
        if not user_id or not title or not message:
            return fail(ERROR_VALIDATION, Toast.error('입력 오류', 'user_id, title, message는 필수입니다.'))
        try:
            ntype = NotificationType(data.get('type', NotificationType.SYSTEM.value))
        except ValueError:
            return fail(ERROR_VALIDATION, Toast.error('입력 오류', f"알 수 없는 알림 유형: {data.get('type')}"))

        record = {
            'user_id': user_id,
            'type': ntype.value,
            'title': title,
            'message': message,
            'is_read': False,
            'related_id': data.get('related_id'),
            'related_type': data.get('related_type'),
            'related_url': data.get('related_url'),
        }
        return self._mutate(
            'create_notification',
            lambda: self.notification_repo.create_notification(record),
            params={'user_id': user_id},
            success_toast=None,
            error_toast=NOTIFICATION_ERROR_TOAST,
            log_tag='ERROR NOTIFICACION',
            scope=(user_id, title, message)
        )

    def create_comment_notification(self, user_id: int, post_title: str,
                                    commenter_name: str, post_id: int) -> Dict[str, Any]:
        return self.create_notification({
            'user_id': user_id,
            'type': NotificationType.COMMENT.value,
            'title': '새 댓글이 달렸습니다',
            'message': f'{commenter_name}님이 "{post_title}" 게시물에 댓글을 달았습니다.',
            'related_id': post_id,
            'related_type': 'post',
            'related_url': f'/community/{post_id}',
        })

    def create_like_notification(self, user_id: int, post_title: str,
                                 liker_name: str, post_id: int) -> Dict[str, Any]:
        return self.create_notification({
            'user_id': user_id,
            'type': NotificationType.LIKE.value,
            'title': '좋아요를 받았습니다',
            'message': f'{liker_name}님이 "{post_title}" 게시물을 좋아합니다.',
            'related_id': post_id,
            'related_type': 'post',
            'related_url': f'/community/{post_id}',
        })

    def create_order_notification(self, user_id: int, order_status: Any, order_id: int) -> Dict[str, Any]:
        return self.create_notification({
            'user_id': user_id,
            'type': NotificationType.ORDER.value,
            'title': ORDER_NOTIFICATION_TITLE,
            'message': order_status_message(order_status),
            'related_id': order_id,
            'related_type': 'order',
            'related_url': ORDERS_TAB_URL,
        })

    def create_system_notification(self, user_id: int, title: str, message: str,
                                   related_url: Optional[str] = None) -> Dict[str, Any]:
        return self.create_notification({
            'user_id': user_id,
            'type': NotificationType.SYSTEM.value,
            'title': title,
            'message': message,
            'related_url': related_url,
        })
