# ==============================================================================
# REPOSITORIO DE RESEÑAS
# ==============================================================================
# reviews.json: una reseña por (usuario, producto)
# ==============================================================================

import os
from typing import Any, Dict, List, Optional

from storefront.models import Review, now_iso
from storefront.repositories.base import ListRepository


class ReviewRepository(ListRepository):
    """
    Repositorio de reseñas de productos.

    El archivo no impone unicidad: el servicio verifica antes de insertar
    y toma el lock de escritura para la segunda verificación.
    """

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'reviews.json'))

    @property
    def write_lock(self):
        """Lock de escritura compartido (para verificar-e-insertar)."""
        return self._file_lock

    def get_review(self, review_id: int) -> Optional[Dict[str, Any]]:
        return self.get_by_id(review_id)

    def get_product_reviews(self, product_id: int) -> List[Dict[str, Any]]:
        reviews = self.find_all_where(product_id=product_id)
        return sorted(reviews, key=lambda r: (r.get('created_at') or '', r.get('id', 0)), reverse=True)

    def get_user_review(self, user_id: int, product_id: int) -> Optional[Dict[str, Any]]:
        return self.find_where(user_id=user_id, product_id=product_id)

    def create_review(self, data: Dict[str, Any]) -> Dict[str, Any]:
        review = Review(
            id=0,
            user_id=data['user_id'],
            product_id=data['product_id'],
            rating=data['rating'],
            content=data['content'],
        )
        return self.insert(review.to_dict())

    def update_review(self, review_id: int, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        updates = dict(updates)
        updates['updated_at'] = now_iso()
        return self.update_by_id(review_id, updates)

    def delete_review(self, review_id: int) -> int:
        return self.delete_where(id=review_id)
