# ==============================================================================
# SERVICIO DE PRODUCTOS - Catálogo (solo lectura)
# ==============================================================================

from typing import Any, Dict, List, Optional

from storefront.models import Product, Category
from storefront.query_cache import QueryResult
from storefront.repositories.interfaces import IProductRepository, ICategoryRepository
from storefront.services.base import BaseService


class ProductService(BaseService):
    """
    Lecturas del catálogo. Los productos se devuelven con las banderas
    calculadas isOutOfStock / isLowStock.
    """

    def __init__(self, product_repo: IProductRepository, category_repo: ICategoryRepository, **kwargs):
        super().__init__(**kwargs)
        self.product_repo = product_repo
        self.category_repo = category_repo

    def fetch_products(
        self,
        category_id: Optional[int] = None,
        featured: Optional[bool] = None,
        available: Optional[bool] = True,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> QueryResult:
        """
        Lista productos con filtros.

        Args:
            category_id: Solo esta categoría
            featured: Solo destacados (True) / no destacados (False)
            available: Solo disponibles (por defecto)
            search: Texto a buscar en nombre y descripción (ambos idiomas)
            limit, offset: Paginación

        Returns:
            QueryResult con lista de productos
        """
        key = ('products', category_id, featured, available, search or '', limit, offset)

        def fetcher() -> List[Dict[str, Any]]:
            products = [Product.from_dict(p) for p in self.product_repo.list_products()]
            if category_id is not None:
                products = [p for p in products if p.category_id == category_id]
            if featured is not None:
                products = [p for p in products if p.is_featured == featured]
            if available is not None:
                products = [p for p in products if p.is_available == available]
            if search:
                needle = search.strip().lower()
                products = [p for p in products if _matches(p, needle)]
            end = offset + limit if limit is not None else None
            return [p.to_display_dict() for p in products[offset:end]]

        return self._query(key, fetcher)

    def fetch_product(self, product_id: int) -> QueryResult:
        def fetcher():
            data = self.product_repo.get_product(product_id)
            return Product.from_dict(data).to_display_dict() if data else None

        return self._query(('product', product_id), fetcher)

    def search_products(self, query: str) -> QueryResult:
        """Búsqueda por texto. Consulta vacía devuelve lista vacía."""
        if not query or not query.strip():
            return QueryResult(data=[])
        return self.fetch_products(search=query)

    def fetch_categories(self) -> QueryResult:
        def fetcher():
            return [Category.from_dict(c).to_dict() for c in self.category_repo.list_categories()]

        return self._query(('categories',), fetcher)


def _matches(product: Product, needle: str) -> bool:
    haystack = ' '.join([
        product.name, product.name_ko, product.description, product.description_ko
    ]).lower()
    return needle in haystack
