# ==============================================================================
# REPOSITORIO DE FAVORITOS
# ==============================================================================
# favorites.json: pares (usuario, producto)
# ==============================================================================

import os
from typing import Any, Dict, List

from storefront.models import Favorite
from storefront.repositories.base import ListRepository


class FavoriteRepository(ListRepository):

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'favorites.json'))

    def get_favorites(self, user_id: int) -> List[Dict[str, Any]]:
        return self.find_all_where(user_id=user_id)

    def exists(self, user_id: int, product_id: int) -> bool:
        return self.find_where(user_id=user_id, product_id=product_id) is not None

    def add(self, user_id: int, product_id: int) -> Dict[str, Any]:
        with self._file_lock:
            existing = self.find_where(user_id=user_id, product_id=product_id)
            if existing:
                return existing
            return self.insert(Favorite(user_id=user_id, product_id=product_id).to_dict())

    def remove(self, user_id: int, product_id: int) -> int:
        return self.delete_where(user_id=user_id, product_id=product_id)
