# ==============================================================================
# SERVICIO DE SEGUIMIENTO DE ENVÍOS
# ==============================================================================
# pending → processing → shipped / in_transit → out_for_delivery → delivered
# Alternativas terminales: failed, returned.
#
# Color, texto e ícono de cada estado salen de tablas estáticas indexadas
# por DeliveryStatus. Cualquier valor no reconocido se muestra como UNKNOWN.
# Las tablas se verifican al importar el módulo.
# ==============================================================================

from typing import Any, Dict, Optional

from storefront.models import DeliveryStatus, Toast
from storefront.query_cache import QueryResult
from storefront.repositories.interfaces import IDeliveryRepository, IOrderRepository
from storefront.services.base import (
    BaseService,
    ServiceError,
    fail,
    ERROR_NOT_FOUND,
    ERROR_VALIDATION,
)


class StatusTableError(Exception):
    """Una tabla de presentación no cubre todos los estados."""
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# TABLAS DE PRESENTACIÓN
# ═══════════════════════════════════════════════════════════════════════════════

DELIVERY_STATUS_COLORS: Dict[DeliveryStatus, str] = {
    DeliveryStatus.PENDING: 'bg-yellow-100 text-yellow-800 dark:bg-yellow-900/30 dark:text-yellow-300',
    DeliveryStatus.PROCESSING: 'bg-blue-100 text-blue-800 dark:bg-blue-900/30 dark:text-blue-300',
    DeliveryStatus.SHIPPED: 'bg-purple-100 text-purple-800 dark:bg-purple-900/30 dark:text-purple-300',
    DeliveryStatus.IN_TRANSIT: 'bg-purple-100 text-purple-800 dark:bg-purple-900/30 dark:text-purple-300',
    DeliveryStatus.OUT_FOR_DELIVERY: 'bg-orange-100 text-orange-800 dark:bg-orange-900/30 dark:text-orange-300',
    DeliveryStatus.DELIVERED: 'bg-green-100 text-green-800 dark:bg-green-900/30 dark:text-green-300',
    DeliveryStatus.FAILED: 'bg-red-100 text-red-800 dark:bg-red-900/30 dark:text-red-300',
    DeliveryStatus.RETURNED: 'bg-red-100 text-red-800 dark:bg-red-900/30 dark:text-red-300',
    DeliveryStatus.UNKNOWN: 'bg-gray-100 text-gray-800 dark:bg-gray-900/30 dark:text-gray-300',
}

# UNKNOWN no tiene texto fijo: se muestra el valor crudo o "상태 없음"
DELIVERY_STATUS_TEXTS: Dict[DeliveryStatus, Optional[str]] = {
    DeliveryStatus.PENDING: '배송 대기',
    DeliveryStatus.PROCESSING: '배송 준비중',
    DeliveryStatus.SHIPPED: '배송 시작',
    DeliveryStatus.IN_TRANSIT: '배송 중',
    DeliveryStatus.OUT_FOR_DELIVERY: '배송 출발',
    DeliveryStatus.DELIVERED: '배송 완료',
    DeliveryStatus.FAILED: '배송 실패',
    DeliveryStatus.RETURNED: '반송',
    DeliveryStatus.UNKNOWN: None,
}

DELIVERY_STATUS_ICONS: Dict[DeliveryStatus, str] = {
    DeliveryStatus.PENDING: '⏳',
    DeliveryStatus.PROCESSING: '📦',
    DeliveryStatus.SHIPPED: '🚚',
    DeliveryStatus.IN_TRANSIT: '🚚',
    DeliveryStatus.OUT_FOR_DELIVERY: '🚛',
    DeliveryStatus.DELIVERED: '✅',
    DeliveryStatus.FAILED: '❌',
    DeliveryStatus.RETURNED: '❌',
    DeliveryStatus.UNKNOWN: '📋',
}

NO_STATUS_TEXT = '상태 없음'


def check_status_tables() -> None:
    """
    Verifica que cada tabla tenga una entrada por cada DeliveryStatus.

    Raises:
        StatusTableError: Si falta algún estado
    """
    for table_name, table in (
        ('DELIVERY_STATUS_COLORS', DELIVERY_STATUS_COLORS),
        ('DELIVERY_STATUS_TEXTS', DELIVERY_STATUS_TEXTS),
        ('DELIVERY_STATUS_ICONS', DELIVERY_STATUS_ICONS),
    ):
        missing = [s.value for s in DeliveryStatus if s not in table]
        if missing:
            raise StatusTableError(f"{table_name} sin entradas para: {', '.join(missing)}")


check_status_tables()


def get_delivery_status_color(status: Optional[str]) -> str:
    return DELIVERY_STATUS_COLORS[DeliveryStatus.parse(status)]


def get_delivery_status_text(status: Optional[str]) -> str:
    text = DELIVERY_STATUS_TEXTS[DeliveryStatus.parse(status)]
    if text is None:
        return status or NO_STATUS_TEXT
    return text


def get_delivery_status_icon(status: Optional[str]) -> str:
    return DELIVERY_STATUS_ICONS[DeliveryStatus.parse(status)]


def decorate_tracking(tracking: Dict[str, Any]) -> Dict[str, Any]:
    """Agrega color, texto e ícono del estado al registro."""
    status = tracking.get('status')
    result = dict(tracking)
    result['status_color'] = get_delivery_status_color(status)
    result['status_text'] = get_delivery_status_text(status)
    result['status_icon'] = get_delivery_status_icon(status)
    return result


# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIO
# ═══════════════════════════════════════════════════════════════════════════════

_EDITABLE_FIELDS = ('courier', 'tracking_number', 'status', 'estimated_delivery')


class DeliveryService(BaseService):

    def __init__(self, delivery_repo: IDeliveryRepository, order_repo: IOrderRepository, **kwargs):
        super().__init__(**kwargs)
        self.delivery_repo = delivery_repo
        self.order_repo = order_repo

    def get_tracking(self, order_id: int) -> QueryResult:
        def fetcher():
            tracking = self.delivery_repo.get_tracking(order_id)
            return decorate_tracking(tracking) if tracking else None

        return self._query(('delivery_tracking', order_id), fetcher)

    def get_all_trackings(self) -> QueryResult:
        return self._query(
            ('delivery_trackings',),
            lambda: [decorate_tracking(t) for t in self.delivery_repo.get_all_trackings()]
        )

    def create_tracking(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Registra el seguimiento de un pedido.

        Args:
            data: order_id (obligatorio), courier, tracking_number,
                  status (por defecto 'pending'), estimated_delivery
        """
        order_id = data.get('order_id')
        if not order_id:
            return fail(ERROR_VALIDATION, Toast.error('배송 정보 등록 실패', '주문번호가 필요합니다.'))

        record = {k: data.get(k) for k in _EDITABLE_FIELDS}
        record['order_id'] = order_id
        record['status'] = record['status'] or DeliveryStatus.PENDING.value

        def action():
            if self.order_repo.get_order(order_id) is None:
                raise ServiceError(ERROR_NOT_FOUND, Toast.error('주문을 찾을 수 없습니다'))
            return self.delivery_repo.create_tracking(record)

        return self._mutate(
            'create_delivery_tracking',
            action,
            params={'order_id': order_id},
            success_toast=Toast('배송 정보가 등록되었습니다', '배송 추적 정보가 성공적으로 등록되었습니다.'),
            error_toast=Toast.error('배송 정보 등록 실패', '배송 정보 등록 중 오류가 발생했습니다. 다시 시도해주세요.'),
            log_tag='ERROR ENVIO',
            scope=order_id
        )

    def update_tracking(self, tracking_id: int, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Modifica courier, número de guía, estado o fecha estimada."""
        changes = {k: v for k, v in updates.items() if k in _EDITABLE_FIELDS}
        if not changes:
            return fail(ERROR_VALIDATION, Toast.error('배송 정보 수정 실패', '변경할 내용이 없습니다.'))

        def action():
            updated = self.delivery_repo.update_tracking(tracking_id, changes)
            if updated is None:
                raise ServiceError(ERROR_NOT_FOUND, Toast.error('배송 정보를 찾을 수 없습니다'))
            return updated

        return self._mutate(
            'update_delivery_tracking',
            action,
            params=lambda tracking: {'tracking_id': tracking_id, 'order_id': tracking.get('order_id')},
            success_toast=Toast('배송 정보가 업데이트되었습니다', '배송 추적 정보가 성공적으로 수정되었습니다.'),
            error_toast=Toast.error('배송 정보 수정 실패', '배송 정보 수정 중 오류가 발생했습니다. 다시 시도해주세요.'),
            log_tag='ERROR ENVIO',
            scope=tracking_id
        )
