# ==============================================================================
# REPOSITORIO DE PEDIDOS
# ==============================================================================
# orders.json: lista de pedidos con sus líneas embebidas en 'items'
# ==============================================================================

import os
from typing import Any, Dict, List, Optional

from storefront.models import Order, now_iso
from storefront.repositories.base import ListRepository


class OrderRepository(ListRepository):
    """
    Repositorio de pedidos.

    Formato de datos en orders.json:
    [
        {
            "id": 1, "user_id": 2, "status": "pending", "total_amount": 64000,
            "items": [{"product_id": 7, "quantity": 2, "price": 32000, "options": null}],
            ...
        }
    ]
    """

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'orders.json'))

    def create_order(self, data: Dict[str, Any]) -> Dict[str, Any]:
        record = dict(data)
        record.setdefault('created_at', now_iso())
        return self.insert(record)

    def get_order(self, order_id: int) -> Optional[Dict[str, Any]]:
        return self.get_by_id(order_id)

    def get_orders_by_user(self, user_id: int) -> List[Dict[str, Any]]:
        """Pedidos del usuario, del más reciente al más antiguo."""
        orders = self.find_all_where(user_id=user_id)
        return sorted(orders, key=lambda o: (o.get('created_at') or '', o.get('id', 0)), reverse=True)

    def update_status(self, order_id: int, status: str) -> Optional[Dict[str, Any]]:
        return self.update_by_id(order_id, {'status': status, 'updated_at': now_iso()})

    def has_purchased(self, user_id: int, product_id: int) -> bool:
        """
        Indica si existe una línea de pedido del usuario para el producto.

        Args:
            user_id: Comprador
            product_id: Producto a verificar

        Returns:
            True si alguna vez lo pidió
        """
        return any(
            Order.from_dict(order).contains_product(product_id)
            for order in self.find_all_where(user_id=user_id)
        )
