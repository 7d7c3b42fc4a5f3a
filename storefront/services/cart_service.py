# ==============================================================================
# SERVICIO DE CARRITO
# ==============================================================================
# Centraliza toda la lógica de negocio relacionada con el carrito de compras.
# El carrito vive en el backend (tabla cart), un item por (usuario, producto).
#
# VERIFICACIONES ANTES DE AGREGAR (en este orden):
#   1. Usuario autenticado
#   2. Backend configurado
#   3. Producto existe y está disponible
#   4. Producto no agotado
#   5. Cantidad >= 1
#   6. Cantidad <= stock (si el producto lleva inventario)
# Si alguna falla NO se escribe nada en el repositorio.
# ==============================================================================

from typing import Any, Dict, Optional

from storefront.models import Product, Toast, User
from storefront.query_cache import QueryResult
from storefront.repositories.interfaces import ICartRepository, IProductRepository
from storefront.services.base import (
    BaseService,
    ServiceError,
    fail,
    login_required_result,
    ERROR_NOT_CONFIGURED,
    ERROR_NOT_FOUND,
    ERROR_VALIDATION,
    NOT_CONFIGURED_TOAST,
)


CART_ERROR_TOAST = Toast.error('장바구니 오류', '장바구니 처리 중 오류가 발생했습니다. 다시 시도해 주세요.')


class CartService(BaseService):
    """
    Servicio para gestión del carrito de compras.

    Responsabilidades:
    - Agregar/eliminar items del carrito
    - Validar stock disponible
    - Calcular totales
    - Limpiar carrito
    """

    def __init__(self, cart_repo: ICartRepository, product_repo: IProductRepository, **kwargs):
        """
        Inicializa el servicio de carrito.

        Args:
            cart_repo: Repositorio de items de carrito
            product_repo: Repositorio de productos (para precio y stock)
        """
        super().__init__(**kwargs)
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    def _load_product(self, product_id: int) -> Optional[Product]:
        data = self.product_repo.get_product(product_id)
        return Product.from_dict(data) if data else None

    # =========================================================================
    # LECTURAS
    # =========================================================================

    def get_cart(self, user: User) -> QueryResult:
        """
        Obtiene el carrito con totales calculados.

        Returns:
            QueryResult con {items, cart_total, item_count}
        """
        def fetcher() -> Dict[str, Any]:
            items = []
            for item in self.cart_repo.get_items(user.id):
                product = self._load_product(item['product_id'])
                entry = dict(item)
                entry['product'] = product.to_display_dict() if product else None
                price = product.base_price if product else 0
                entry['subtotal'] = round(price * item.get('quantity', 0), 2)
                items.append(entry)
            return {
                'items': items,
                'cart_total': round(sum(i['subtotal'] for i in items), 2),
                'item_count': sum(i.get('quantity', 0) for i in items),
            }

        return self._query(('cart', user.id), fetcher)

    # =========================================================================
    # VERIFICACIONES
    # =========================================================================

    def check_add_to_cart(self, user: Optional[User], product: Optional[Product], quantity: int) -> Optional[Dict[str, Any]]:
        """
        Verificaciones previas a agregar al carrito.

        Returns:
            Dict de resultado fallido, o None si todo está bien
        """
        if user is None:
            return login_required_result('장바구니를 이용하려면 로그인해주세요.')

        if not self.backend_configured:
            return fail(ERROR_NOT_CONFIGURED, NOT_CONFIGURED_TOAST)

        if product is None:
            return fail(ERROR_NOT_FOUND, Toast.error('상품을 찾을 수 없습니다'))

        if not product.is_available:
            return fail(ERROR_VALIDATION, Toast.error('상품을 사용할 수 없습니다', '현재 판매하지 않는 상품입니다.'))

        if product.is_out_of_stock:
            return fail(ERROR_VALIDATION, Toast.error('품절된 상품입니다', '재입고 후 다시 시도해 주세요.'))

        if quantity is None or quantity < 1:
            return fail(ERROR_VALIDATION, Toast.error('수량을 확인해주세요', '수량은 1개 이상이어야 합니다.'))

        if product.stock is not None and quantity > product.stock:
            return fail(ERROR_VALIDATION, Toast.error(
                '재고가 부족합니다',
                f'요청 수량: {quantity}개, 현재 재고: {product.stock}개'
            ))

        return None

    # =========================================================================
    # MUTACIONES
    # =========================================================================

    def add_item(self, user: Optional[User], product_id: int, quantity: int = 1,
                 options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Agrega un item al carrito.

        Args:
            user: Usuario de la sesión (None si no hay sesión)
            product_id: ID del producto
            quantity: Cantidad a agregar
            options: Opciones de personalización

        Returns:
            Dict con resultado (ok, data, toast, error)
        """
        product = self._load_product(product_id) if user is not None and self.backend_configured else None
        rejected = self.check_add_to_cart(user, product, quantity)
        if rejected:
            return rejected

        name = product.name_ko or product.name
        return self._mutate(
            'add_to_cart',
            lambda: self.cart_repo.add_item(user.id, product_id, quantity, options),
            params={'user_id': user.id, 'product_id': product_id},
            success_toast=Toast('장바구니에 추가되었습니다', f'{name} {quantity}개'),
            error_toast=CART_ERROR_TOAST,
            log_tag='ERROR CARRITO',
            scope=(user.id, product_id)
        )

    def update_quantity(self, user: Optional[User], item_id: int, quantity: int) -> Dict[str, Any]:
        if user is None:
            return login_required_result()
        if quantity is None or quantity < 1:
            return fail(ERROR_VALIDATION, Toast.error('수량을 확인해주세요', '수량은 1개 이상이어야 합니다.'))

        def action():
            item = self.cart_repo.get_item(user.id, item_id)
            if item is None:
                raise ServiceError(ERROR_NOT_FOUND, Toast.error('장바구니 항목을 찾을 수 없습니다'))
            product = self._load_product(item['product_id'])
            if product and product.stock is not None and quantity > product.stock:
                raise ServiceError(ERROR_VALIDATION, Toast.error(
                    '재고가 부족합니다',
                    f'요청 수량: {quantity}개, 현재 재고: {product.stock}개'
                ))
            return self.cart_repo.set_quantity(user.id, item_id, quantity)

        return self._mutate(
            'update_cart_quantity',
            action,
            params={'user_id': user.id, 'item_id': item_id},
            success_toast=None,
            error_toast=CART_ERROR_TOAST,
            log_tag='ERROR CARRITO',
            scope=(user.id, item_id)
        )

    def remove_item(self, user: Optional[User], product_id: int) -> Dict[str, Any]:
        if user is None:
            return login_required_result()
        return self._mutate(
            'remove_from_cart',
            lambda: {'removed': self.cart_repo.remove_item(user.id, product_id)},
            params={'user_id': user.id, 'product_id': product_id},
            success_toast=Toast('장바구니에서 삭제되었습니다'),
            error_toast=CART_ERROR_TOAST,
            log_tag='ERROR CARRITO',
            scope=(user.id, product_id)
        )

    def clear(self, user: Optional[User]) -> Dict[str, Any]:
        """Vacía el carrito del usuario."""
        if user is None:
            return login_required_result()
        return self._mutate(
            'clear_cart',
            lambda: {'removed': self.cart_repo.clear(user.id)},
            params={'user_id': user.id},
            success_toast=Toast('장바구니를 비웠습니다'),
            error_toast=CART_ERROR_TOAST,
            log_tag='ERROR CARRITO',
            scope=user.id
        )
