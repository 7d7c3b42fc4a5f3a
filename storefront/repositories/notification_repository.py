# ==============================================================================
# REPOSITORIO DE NOTIFICACIONES
# ==============================================================================

import os
from typing import Any, Dict, List, Optional

from storefront.models import now_iso
from storefront.repositories.base import ListRepository


class NotificationRepository(ListRepository):
    """
    Repositorio de notificaciones.

    Formato de datos en notifications.json:
    [
        {"id": 1, "user_id": 2, "type": "order", "title": "...", "message": "...",
         "is_read": false, "related_id": 5, "related_type": "order",
         "related_url": "/mypage?tab=orders", "created_at": "..."}
    ]
    """

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'notifications.json'))

    def get_notification(self, notification_id: int) -> Optional[Dict[str, Any]]:
        return self.get_by_id(notification_id)

    def get_notifications(self, user_id: int) -> List[Dict[str, Any]]:
        """Notificaciones del usuario, más recientes primero."""
        items = self.find_all_where(user_id=user_id)
        return sorted(items, key=lambda n: (n.get('created_at') or '', n.get('id', 0)), reverse=True)

    def create_notification(self, data: Dict[str, Any]) -> Dict[str, Any]:
        record = dict(data)
        record.setdefault('is_read', False)
        record.setdefault('created_at', now_iso())
        return self.insert(record)

    def mark_as_read(self, notification_id: int) -> Optional[Dict[str, Any]]:
        return self.update_by_id(notification_id, {'is_read': True})

    def mark_all_as_read(self, user_id: int) -> int:
        """
        Marca como leídas todas las no leídas del usuario.

        Returns:
            Cantidad de notificaciones modificadas
        """
        changed = self.update_where(
            {'is_read': True},
            lambda n: n.get('user_id') == user_id and not n.get('is_read')
        )
        return len(changed)
