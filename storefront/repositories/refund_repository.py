# ==============================================================================
# REPOSITORIO DE SOLICITUDES DE REEMBOLSO
# ==============================================================================

import os
from typing import Any, Dict, List, Optional

from storefront.models import RefundRequest, RefundStatus
from storefront.repositories.base import ListRepository


class RefundRepository(ListRepository):
    """
    Repositorio de solicitudes de reembolso.
    Como máximo una solicitud por pedido (lo verifica el servicio).
    """

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'refund_requests.json'))

    @property
    def write_lock(self):
        return self._file_lock

    def get_request_for_order(self, order_id: int) -> Optional[Dict[str, Any]]:
        return self.find_where(order_id=order_id)

    def get_user_requests(self, user_id: int) -> List[Dict[str, Any]]:
        requests = self.find_all_where(user_id=user_id)
        return sorted(requests, key=lambda r: (r.get('requested_at') or '', r.get('id', 0)), reverse=True)

    def create_request(self, data: Dict[str, Any]) -> Dict[str, Any]:
        request = RefundRequest(
            id=0,
            order_id=data['order_id'],
            user_id=data['user_id'],
            reason=data['reason'],
            description=data.get('description') or '',
            amount=float(data.get('amount') or 0),
            status=RefundStatus(data.get('status', RefundStatus.PENDING.value)),
        )
        return self.insert(request.to_dict())
