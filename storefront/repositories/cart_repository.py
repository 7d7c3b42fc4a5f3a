# ==============================================================================
# REPOSITORIO DE CARRITO
# ==============================================================================
# cart.json: lista de items, uno por (usuario, producto)
# ==============================================================================

import os
from typing import Any, Dict, List, Optional

from storefront.models import CartItem, now_iso
from storefront.repositories.base import ListRepository


class CartRepository(ListRepository):
    """
    Repositorio de items de carrito.

    Formato de datos en cart.json:
    [
        {"id": 1, "user_id": 2, "product_id": 7, "quantity": 1, "customization_options": null, ...}
    ]
    """

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'cart.json'))

    def get_items(self, user_id: int) -> List[Dict[str, Any]]:
        return self.find_all_where(user_id=user_id)

    def get_item(self, user_id: int, item_id: int) -> Optional[Dict[str, Any]]:
        return self.find_where(id=item_id, user_id=user_id)

    def add_item(self, user_id: int, product_id: int, quantity: int,
                 options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Agrega un producto al carrito o suma la cantidad si ya estaba.

        Returns:
            Item resultante
        """
        with self._file_lock:
            existing = self.find_where(user_id=user_id, product_id=product_id)
            if existing:
                return self.update_by_id(existing['id'], {
                    'quantity': existing.get('quantity', 0) + quantity,
                    'updated_at': now_iso(),
                })
            item = CartItem(id=0, user_id=user_id, product_id=product_id,
                            quantity=quantity, customization_options=options)
            return self.insert(item.to_dict())

    def set_quantity(self, user_id: int, item_id: int, quantity: int) -> Optional[Dict[str, Any]]:
        """Fija la cantidad de un item del usuario. None si no es suyo."""
        with self._file_lock:
            item = self.find_where(id=item_id, user_id=user_id)
            if item is None:
                return None
            return self.update_by_id(item_id, {'quantity': quantity, 'updated_at': now_iso()})

    def remove_item(self, user_id: int, product_id: int) -> int:
        return self.delete_where(user_id=user_id, product_id=product_id)

    def clear(self, user_id: int) -> int:
        return self.delete_where(user_id=user_id)
