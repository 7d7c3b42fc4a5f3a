# ==============================================================================
# REPOSITORIO DE SEGUIMIENTO DE ENVÍOS
# ==============================================================================

import os
from typing import Any, Dict, List, Optional

from storefront.models import DeliveryStatus, DeliveryTracking, now_iso
from storefront.repositories.base import ListRepository


class DeliveryRepository(ListRepository):

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'delivery_tracking.json'))

    def get_tracking(self, order_id: int) -> Optional[Dict[str, Any]]:
        return self.find_where(order_id=order_id)

    def get_all_trackings(self) -> List[Dict[str, Any]]:
        return sorted(self.get_all(), key=lambda t: (t.get('created_at') or '', t.get('id', 0)), reverse=True)

    def create_tracking(self, data: Dict[str, Any]) -> Dict[str, Any]:
        tracking = DeliveryTracking(
            id=0,
            order_id=data['order_id'],
            courier=data.get('courier') or '',
            tracking_number=data.get('tracking_number') or '',
            status=data.get('status') or DeliveryStatus.PENDING.value,
            estimated_delivery=data.get('estimated_delivery'),
        )
        return self.insert(tracking.to_dict())

    def update_tracking(self, tracking_id: int, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        updates = dict(updates)
        updates['updated_at'] = now_iso()
        return self.update_by_id(tracking_id, updates)
