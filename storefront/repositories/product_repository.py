# ==============================================================================
# REPOSITORIO DE CATÁLOGO - Productos y categorías
# ==============================================================================
# products.json y categories.json se guardan como diccionario {id: datos}
# ==============================================================================

import os
from typing import Any, Dict, List, Optional

from storefront.models import now_iso
from storefront.repositories.base import DictRepository


class InsufficientStockError(Exception):
    """El descuento dejaría el stock en negativo."""

    def __init__(self, product_id: int, stock: int, requested: int):
        super().__init__(
            f"Stock insuficiente para producto {product_id}: stock={stock}, pedido={requested}"
        )
        self.product_id = product_id
        self.stock = stock
        self.requested = requested


class ProductRepository(DictRepository):
    """
    Repositorio de productos.

    Formato de datos en products.json:
    {
        "1": {"id": 1, "name": "Cake", "name_ko": "케이크", "base_price": 32000, "stock": 4, ...}
    }
    """

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'products.json'))

    def list_products(self) -> List[Dict[str, Any]]:
        """Productos ordenados del más nuevo al más antiguo."""
        products = list(self.get_all().values())
        return sorted(products, key=lambda p: p.get('created_at') or '', reverse=True)

    def get_product(self, product_id: int) -> Optional[Dict[str, Any]]:
        return self.get_by_id(product_id)

    def save_product(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Crea o reemplaza un producto.

        Returns:
            Registro guardado (con 'id' asignado si no lo traía)
        """
        with self._file_lock:
            record = dict(data)
            if not record.get('id'):
                record['id'] = self.next_id()
            record.setdefault('created_at', now_iso())
            self.update(record['id'], record)
            return record

    @property
    def write_lock(self):
        """Lock de escritura compartido (verificar stock y descontar)."""
        return self._file_lock

    def decrement_stock(self, product_id: int, quantity: int) -> Optional[int]:
        """
        Descuenta stock de un producto.

        Los productos sin stock definido no se modifican.

        Returns:
            Nuevo stock, o None si el producto no lleva inventario

        Raises:
            InsufficientStockError: Si el stock no alcanza
        """
        with self._file_lock:
            product = self.get_product(product_id)
            if product is None or product.get('stock') is None:
                return None
            remaining = int(product['stock']) - quantity
            if remaining < 0:
                raise InsufficientStockError(product_id, int(product['stock']), quantity)
            product['stock'] = remaining
            self.update(product_id, product)
            return product['stock']

    def restore_stock(self, product_id: int, quantity: int) -> Optional[int]:
        """Devuelve stock descontado (pedido que no llegó a crearse)."""
        with self._file_lock:
            product = self.get_product(product_id)
            if product is None or product.get('stock') is None:
                return None
            product['stock'] = int(product['stock']) + quantity
            self.update(product_id, product)
            return product['stock']


class CategoryRepository(DictRepository):
    """Repositorio de categorías."""

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'categories.json'))

    def list_categories(self, active_only: bool = True) -> List[Dict[str, Any]]:
        categories = [
            c for c in self.get_all().values()
            if c.get('is_active', True) or not active_only
        ]
        return sorted(categories, key=lambda c: c.get('sort_order', 0))
