# ==============================================================================
# SERVICIO DE FAVORITOS (찜)
# ==============================================================================
# Un favorito es la pertenencia del par (usuario, producto) al conjunto.
# toggle_favorite invierte la pertenencia y devuelve el nuevo estado.
# ==============================================================================

from typing import Any, Dict, Optional

from storefront.models import Product, Toast, User
from storefront.query_cache import QueryResult
from storefront.repositories.interfaces import IFavoriteRepository, IProductRepository
from storefront.services.base import (
    BaseService,
    fail,
    login_required_result,
    ERROR_NOT_CONFIGURED,
    NOT_CONFIGURED_TOAST,
)


class FavoriteService(BaseService):

    def __init__(self, favorite_repo: IFavoriteRepository, product_repo: IProductRepository, **kwargs):
        super().__init__(**kwargs)
        self.favorite_repo = favorite_repo
        self.product_repo = product_repo

    def get_favorites(self, user: User) -> QueryResult:
        """Favoritos del usuario con los datos del producto."""
        def fetcher():
            result = []
            for fav in self.favorite_repo.get_favorites(user.id):
                entry = dict(fav)
                product = self.product_repo.get_product(fav['product_id'])
                entry['product'] = Product.from_dict(product).to_display_dict() if product else None
                result.append(entry)
            return result

        return self._query(('favorites', user.id), fetcher)

    def is_favorited(self, user: Optional[User], product_id: int) -> QueryResult:
        if user is None:
            return QueryResult(data=False)
        return self._query(
            ('is_favorite', user.id, product_id),
            lambda: self.favorite_repo.exists(user.id, product_id)
        )

    def toggle_favorite(self, user: Optional[User], product_id: int) -> Dict[str, Any]:
        """
        Agrega o quita el producto de los favoritos del usuario.

        Returns:
            Resultado con data={'is_favorite': nuevo estado}
        """
        if user is None:
            return login_required_result('찜 기능을 사용하려면 로그인해주세요.')
        if not self.backend_configured:
            return fail(ERROR_NOT_CONFIGURED, NOT_CONFIGURED_TOAST)

        def action():
            if self.favorite_repo.exists(user.id, product_id):
                self.favorite_repo.remove(user.id, product_id)
                return {'product_id': product_id, 'is_favorite': False}
            self.favorite_repo.add(user.id, product_id)
            return {'product_id': product_id, 'is_favorite': True}

        def success_toast(data):
            if data['is_favorite']:
                return Toast('찜 추가 완료', '찜 목록에 추가되었습니다.')
            return Toast('찜 제거 완료', '찜 목록에서 제거되었습니다.')

        return self._mutate(
            'toggle_favorite',
            action,
            params={'user_id': user.id, 'product_id': product_id},
            success_toast=success_toast,
            error_toast=Toast.error('오류 발생', '찜 처리 중 오류가 발생했습니다.'),
            log_tag='ERROR FAVORITO',
            scope=(user.id, product_id)
        )
