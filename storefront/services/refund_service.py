# ==============================================================================
# SERVICIO DE SOLICITUDES DE REEMBOLSO
# ==============================================================================
# none → pending (se crea aquí) → approved | rejected (lo resuelve el backoffice)
#
# Al crear la solicitud el pedido pasa a 'refund_requested'.
# Como máximo una solicitud por pedido.
# ==============================================================================

from typing import Any, Dict, Optional

from storefront.models import OrderStatus, RefundStatus, Toast, User
from storefront.query_cache import QueryResult
from storefront.repositories.interfaces import IOrderRepository, IRefundRepository
from storefront.services.base import (
    BaseService,
    ServiceError,
    fail,
    ERROR_AUTH_REQUIRED,
    ERROR_FORBIDDEN,
    ERROR_NOT_FOUND,
    ERROR_VALIDATION,
)


MSG_ALREADY_REQUESTED = '이미 환불 요청이 존재합니다.'


class RefundService(BaseService):

    def __init__(self, refund_repo: IRefundRepository, order_repo: IOrderRepository, **kwargs):
        super().__init__(**kwargs)
        self.refund_repo = refund_repo
        self.order_repo = order_repo

    def check_request(self, order_id: int) -> QueryResult:
        """
        Indica si el pedido ya tiene solicitud.

        Returns:
            QueryResult con {exists, request}
        """
        def fetcher():
            request = self.refund_repo.get_request_for_order(order_id)
            return {'exists': request is not None, 'request': request}

        return self._query(('refund_request_check', order_id), fetcher)

    def get_user_requests(self, user_id: int) -> QueryResult:
        """Solicitudes del usuario con un resumen del pedido."""
        def fetcher():
            result = []
            for request in self.refund_repo.get_user_requests(user_id):
                entry = dict(request)
                order = self.order_repo.get_order(request.get('order_id'))
                entry['order'] = {
                    'id': order['id'],
                    'total_amount': order.get('total_amount'),
                    'created_at': order.get('created_at'),
                    'items': order.get('items', []),
                } if order else None
                result.append(entry)
            return result

        return self._query(('refund_requests', user_id), fetcher)

    def create_request(self, user: Optional[User], order_id: int, reason: str,
                       description: str = '') -> Dict[str, Any]:
        """
        Crea una solicitud de reembolso para un pedido propio.

        Args:
            user: Usuario de la sesión
            order_id: Pedido a reembolsar
            reason: Motivo (obligatorio)
            description: Detalle opcional

        Returns:
            Dict de resultado con la solicitud en 'data'
        """
        reason = (reason or '').strip()
        if not reason:
            return fail(ERROR_VALIDATION, Toast.error('환불 사유 필요', '환불 사유를 입력해주세요.'))
        if user is None:
            return fail(ERROR_AUTH_REQUIRED, Toast.error('로그인 필요', '환불 요청을 하려면 로그인해주세요.'))

        def action():
            order = self.order_repo.get_order(order_id)
            if order is None:
                raise ServiceError(ERROR_NOT_FOUND, Toast.error('환불 요청 실패', '주문을 찾을 수 없습니다.'))
            if order.get('user_id') != user.id:
                raise ServiceError(ERROR_FORBIDDEN, Toast.error('환불 요청 실패', '본인의 주문만 환불 요청할 수 있습니다.'))

            with self.refund_repo.write_lock:
                if self.refund_repo.get_request_for_order(order_id):
                    raise ServiceError(ERROR_VALIDATION, Toast.error('환불 요청 실패', MSG_ALREADY_REQUESTED))
                created = self.refund_repo.create_request({
                    'order_id': order_id,
                    'user_id': user.id,
                    'reason': reason,
                    'description': description or '',
                    'amount': order.get('total_amount', 0),
                    'status': RefundStatus.PENDING.value,
                })

            try:
                self.order_repo.update_status(order_id, OrderStatus.REFUND_REQUESTED.value)
            except OSError as e:
                # La solicitud ya existe; el estado del pedido se corrige desde el backoffice
                print(f"[ADVERTENCIA] No se pudo marcar el pedido {order_id} como refund_requested: {e}")
            return created

        return self._mutate(
            'create_refund_request',
            action,
            params={'order_id': order_id, 'user_id': user.id},
            success_toast=Toast('환불 요청 완료', '환불 요청이 성공적으로 접수되었습니다. 검토 후 연락드리겠습니다.'),
            error_toast=Toast.error('환불 요청 실패', '환불 요청 생성에 실패했습니다.'),
            log_tag='ERROR REEMBOLSO',
            scope=order_id
        )
