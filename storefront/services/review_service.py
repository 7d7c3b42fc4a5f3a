# ==============================================================================
# SERVICIO DE RESEÑAS
# ==============================================================================
# Reglas de una reseña nueva (en este orden):
#   1. Usuario autenticado
#   2. Puntuación entre 1 y 5
#   3. Contenido no vacío
#   4. El usuario compró el producto (existe una línea de pedido)
#   5. El usuario no tiene ya una reseña del producto
#
# La verificación 5 se repite dentro del lock de escritura del repositorio
# justo antes de insertar, para que dos envíos simultáneos no creen duplicados.
# ==============================================================================

from typing import Any, Dict, Optional

from storefront.models import Toast, User, MIN_RATING, MAX_RATING
from storefront.query_cache import QueryResult
from storefront.repositories.interfaces import IOrderRepository, IReviewRepository
from storefront.services.base import (
    BaseService,
    ServiceError,
    fail,
    login_required_result,
    ERROR_FORBIDDEN,
    ERROR_NOT_FOUND,
    ERROR_VALIDATION,
)


MSG_RATING_REQUIRED = '평점을 선택해주세요.'
MSG_CONTENT_REQUIRED = '내용을 입력해주세요.'
MSG_NOT_PURCHASED = '구매한 상품에 대해서만 리뷰를 남길 수 있습니다.'
MSG_ALREADY_REVIEWED = '이미 리뷰를 작성하셨습니다.'


def _valid_rating(rating: Any) -> bool:
    return isinstance(rating, int) and not isinstance(rating, bool) and MIN_RATING <= rating <= MAX_RATING


class ReviewService(BaseService):
    """
    Servicio de reseñas de productos.

    Responsabilidades:
    - Listar reseñas con promedio y total
    - Verificar elegibilidad (compra previa, sin duplicado)
    - Crear, editar y eliminar la reseña propia
    """

    def __init__(self, review_repo: IReviewRepository, order_repo: IOrderRepository, **kwargs):
        super().__init__(**kwargs)
        self.review_repo = review_repo
        self.order_repo = order_repo

    # =========================================================================
    # LECTURAS
    # =========================================================================

    def get_product_reviews(self, product_id: int) -> QueryResult:
        """
        Reseñas de un producto.

        Returns:
            QueryResult con {reviews, average_rating, total_reviews}
        """
        def fetcher() -> Dict[str, Any]:
            reviews = self.review_repo.get_product_reviews(product_id)
            total = len(reviews)
            average = sum(r.get('rating', 0) for r in reviews) / total if total else 0
            return {
                'reviews': reviews,
                'average_rating': round(average, 2),
                'total_reviews': total,
            }

        return self._query(('product_reviews', product_id), fetcher)

    def get_user_review(self, user_id: int, product_id: int) -> QueryResult:
        return self._query(
            ('user_review', user_id, product_id),
            lambda: self.review_repo.get_user_review(user_id, product_id)
        )

    # =========================================================================
    # VERIFICACIONES
    # =========================================================================

    def check_review_eligibility(self, user: User, product_id: int) -> Optional[Dict[str, Any]]:
        """
        Las dos consultas previas a insertar: compra y duplicado.

        Returns:
            Resultado fallido, o None si puede reseñar
        """
        if not self.order_repo.has_purchased(user.id, product_id):
            return fail(ERROR_FORBIDDEN, Toast.error('리뷰 작성 불가', MSG_NOT_PURCHASED))
        if self.review_repo.get_user_review(user.id, product_id):
            return fail(ERROR_VALIDATION, Toast.error('리뷰 작성 불가', MSG_ALREADY_REVIEWED))
        return None

    # =========================================================================
    # MUTACIONES
    # =========================================================================

    def submit_review(self, user: Optional[User], product_id: int, rating: Any, content: str) -> Dict[str, Any]:
        """
        Crea la reseña del usuario para el producto.

        Args:
            user: Usuario de la sesión
            product_id: Producto reseñado
            rating: Puntuación 1..5
            content: Texto de la reseña

        Returns:
            Dict de resultado con la reseña creada en 'data'
        """
        if user is None:
            return login_required_result('리뷰를 작성하려면 로그인해주세요.')
        if not _valid_rating(rating):
            return fail(ERROR_VALIDATION, Toast.error('입력 오류', MSG_RATING_REQUIRED))
        content = (content or '').strip()
        if not content:
            return fail(ERROR_VALIDATION, Toast.error('입력 오류', MSG_CONTENT_REQUIRED))

        rejected = self.check_review_eligibility(user, product_id)
        if rejected:
            return rejected

        def action():
            with self.review_repo.write_lock:
                if self.review_repo.get_user_review(user.id, product_id):
                    raise ServiceError(ERROR_VALIDATION, Toast.error('리뷰 작성 불가', MSG_ALREADY_REVIEWED))
                return self.review_repo.create_review({
                    'user_id': user.id,
                    'product_id': product_id,
                    'rating': rating,
                    'content': content,
                })

        return self._mutate(
            'create_review',
            action,
            params={'user_id': user.id, 'product_id': product_id},
            success_toast=Toast('리뷰가 등록되었습니다', '소중한 의견을 주셔서 감사합니다.'),
            error_toast=Toast.error('리뷰 등록 실패', '리뷰 등록 중 오류가 발생했습니다. 다시 시도해주세요.'),
            log_tag='ERROR RESEÑA',
            scope=(user.id, product_id)
        )

    def _owned_review(self, user: User, review_id: int) -> Dict[str, Any]:
        review = self.review_repo.get_review(review_id)
        if review is None:
            raise ServiceError(ERROR_NOT_FOUND, Toast.error('리뷰를 찾을 수 없습니다'))
        if review.get('user_id') != user.id:
            raise ServiceError(ERROR_FORBIDDEN, Toast.error('권한이 없습니다', '본인이 작성한 리뷰만 수정할 수 있습니다.'))
        return review

    def update_review(self, user: Optional[User], review_id: int,
                      rating: Any = None, content: Optional[str] = None) -> Dict[str, Any]:
        """Edita puntuación y/o contenido de la reseña propia."""
        if user is None:
            return login_required_result()
        updates = {}
        if rating is not None:
            if not _valid_rating(rating):
                return fail(ERROR_VALIDATION, Toast.error('입력 오류', MSG_RATING_REQUIRED))
            updates['rating'] = rating
        if content is not None:
            if not content.strip():
                return fail(ERROR_VALIDATION, Toast.error('입력 오류', MSG_CONTENT_REQUIRED))
            updates['content'] = content.strip()

        def action():
            review = self._owned_review(user, review_id)
            if not updates:
                return review
            return self.review_repo.update_review(review_id, updates) or review

        return self._mutate(
            'update_review',
            action,
            params=lambda data: {'review_id': review_id, 'product_id': data.get('product_id')},
            success_toast=Toast('리뷰가 수정되었습니다', '리뷰가 성공적으로 업데이트되었습니다.'),
            error_toast=Toast.error('리뷰 수정 실패', '리뷰 수정 중 오류가 발생했습니다. 다시 시도해주세요.'),
            log_tag='ERROR RESEÑA',
            scope=review_id
        )

    def delete_review(self, user: Optional[User], review_id: int) -> Dict[str, Any]:
        if user is None:
            return login_required_result()

        def action():
            review = self._owned_review(user, review_id)
            self.review_repo.delete_review(review_id)
            return {'id': review_id, 'product_id': review.get('product_id')}

        return self._mutate(
            'delete_review',
            action,
            params=lambda data: {'review_id': review_id, 'product_id': data.get('product_id')},
            success_toast=Toast('리뷰가 삭제되었습니다', '리뷰가 성공적으로 삭제되었습니다.'),
            error_toast=Toast.error('리뷰 삭제 실패', '리뷰 삭제 중 오류가 발생했습니다. 다시 시도해주세요.'),
            log_tag='ERROR RESEÑA',
            scope=review_id
        )
