# ==============================================================================
# SERVICIO DE PEDIDOS
# ==============================================================================
# Flujo de place_order:
#   1. Usuario autenticado
#   2. Lista de items no vacía (si no se envía, se usa el carrito)
#   3. Verificación de stock por producto (cantidades sumadas)
#   4. Con el stock bloqueado: nueva verificación → descuento → pedido (pending)
#      Si la creación falla, el stock descontado se devuelve.
#   5. Vaciar carrito
#   6. Notificación "주문이 접수되었습니다"
# ==============================================================================

from typing import Any, Dict, List, Mapping, Optional

from storefront.models import Order, OrderItem, OrderStatus, Product, Toast, User
from storefront.performance_logger import profile_function
from storefront.query_cache import QueryResult
from storefront.repositories.interfaces import (
    ICartRepository,
    IOrderRepository,
    IProductRepository,
)
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
from storefront.services.notification_service import NotificationService


ORDER_ERROR_TOAST = Toast.error('주문 실패', '주문 처리 중 오류가 발생했습니다. 다시 시도해 주세요.')


class OrderService(BaseService):
    """
    Servicio de pedidos.

    Responsabilidades:
    - Listar pedidos del usuario y ver un pedido
    - Crear pedidos con verificación y descuento de stock
    - Cambiar estado (administración) notificando al cliente
    """

    def __init__(
        self,
        order_repo: IOrderRepository,
        product_repo: IProductRepository,
        cart_repo: ICartRepository,
        notification_service: NotificationService,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.cart_repo = cart_repo
        self.notification_service = notification_service

    # =========================================================================
    # LECTURAS
    # =========================================================================

    def get_user_orders(self, user: User) -> QueryResult:
        return self._query(
            ('orders', user.id),
            lambda: [Order.from_dict(o).to_dict() for o in self.order_repo.get_orders_by_user(user.id)]
        )

    def get_order(self, order_id: int) -> QueryResult:
        def fetcher():
            data = self.order_repo.get_order(order_id)
            return Order.from_dict(data).to_dict() if data else None

        return self._query(('order', order_id), fetcher)

    # =========================================================================
    # VERIFICACIÓN DE STOCK
    # =========================================================================

    def _normalize_items(self, user: User, items: Any) -> List[Dict[str, Any]]:
        """
        Items del pedido; si no se envían, los del carrito.

        Raises:
            ValueError: Si items no es una lista de objetos
        """
        if items is None:
            items = self.cart_repo.get_items(user.id)
        if not isinstance(items, list):
            raise ValueError('items debe ser una lista')
        normalized = []
        for item in items:
            if not isinstance(item, Mapping):
                raise ValueError(f'item inválido: {item!r}')
            normalized.append({
                'product_id': int(item.get('product_id')),
                'quantity': int(item.get('quantity', 0)),
                'options': item.get('options', item.get('customization_options')),
            })
        return normalized

    def check_stock(self, items: List[Dict[str, Any]]) -> List[Any]:
        """
        Verifica los items contra el catálogo.

        Las líneas del mismo producto se suman antes de comparar con el stock.

        Returns:
            Lista de (item, Product)

        Raises:
            ServiceError: Producto inexistente, retirado o sin stock suficiente
        """
        requested = {}
        for item in items:
            if item['quantity'] < 1:
                raise ServiceError(ERROR_VALIDATION, Toast.error('주문 실패', '수량은 1개 이상이어야 합니다.'))
            requested[item['product_id']] = requested.get(item['product_id'], 0) + item['quantity']

        products = {}
        for product_id, quantity in requested.items():
            data = self.product_repo.get_product(product_id)
            if not data:
                raise ServiceError(ERROR_NOT_FOUND, Toast.error(
                    '주문 실패', f"상품 정보를 찾을 수 없습니다. (상품 ID: {product_id})"
                ))
            product = Product.from_dict(data)
            name = product.name_ko or product.name
            if not product.is_available:
                raise ServiceError(ERROR_VALIDATION, Toast.error(
                    '주문 실패', f'{name}는 현재 판매 중단된 상품입니다.'
                ))
            if product.stock is not None and product.stock < quantity:
                raise ServiceError(ERROR_VALIDATION, Toast.error(
                    '재고가 부족합니다',
                    f"{name}의 재고가 부족합니다. (요청: {quantity}개, 재고: {product.stock}개)"
                ))
            products[product_id] = product

        return [(item, products[item['product_id']]) for item in items]

    # =========================================================================
    # MUTACIONES
    # =========================================================================

    @profile_function(name="Crear pedido")
    def place_order(
        self,
        user: Optional[User],
        items: Optional[List[Dict[str, Any]]] = None,
        shipping_address: str = '',
        payment_method: str = ''
    ) -> Dict[str, Any]:
        """
        Crea un pedido.

        Args:
            user: Usuario de la sesión
            items: [{product_id, quantity, options}] (None = carrito actual)
            shipping_address: Dirección de envío
            payment_method: Medio de pago

        Returns:
            Dict de resultado con el pedido creado en 'data'
        """
        if user is None:
            return login_required_result('주문하려면 먼저 로그인해 주세요.')
        if not self.backend_configured:
            return fail(ERROR_NOT_CONFIGURED, NOT_CONFIGURED_TOAST)

        try:
            items = self._normalize_items(user, items)
        except (AttributeError, TypeError, ValueError):
            return fail(ERROR_VALIDATION, Toast.error('주문 실패', '주문 항목이 올바르지 않습니다.'))
        if not items:
            return fail(ERROR_VALIDATION, Toast.error('주문 실패', '주문할 상품이 없습니다.'))

        try:
            self.check_stock(items)
        except ServiceError as e:
            return fail(e.code, e.toast)

        def action():
            # Segunda verificación con el stock bloqueado: otro pedido pudo
            # descontar entre la primera verificación y este punto
            with self.product_repo.write_lock:
                checked = self.check_stock(items)

                decremented = []
                try:
                    for item, product in checked:
                        self.product_repo.decrement_stock(product.id, item['quantity'])
                        decremented.append(item)

                    order_items = [
                        OrderItem(product.id, item['quantity'], product.base_price, item['options'])
                        for item, product in checked
                    ]
                    order = Order(
                        id=0,
                        user_id=user.id,
                        status=OrderStatus.PENDING,
                        total_amount=sum(i.subtotal for i in order_items),
                        shipping_address=shipping_address or '',
                        payment_method=payment_method or '',
                        items=order_items,
                    )
                    record = order.to_dict()
                    record.pop('id')
                    created = self.order_repo.create_order(record)
                except Exception:
                    for item in decremented:
                        self.product_repo.restore_stock(item['product_id'], item['quantity'])
                    raise

            self.cart_repo.clear(user.id)
            return created

        result = self._mutate(
            'create_order',
            action,
            params={'user_id': user.id},
            success_toast=lambda order: Toast('주문이 완료되었습니다', f"주문번호: {order['id']}"),
            error_toast=ORDER_ERROR_TOAST,
            log_tag='ERROR PEDIDO',
            scope=user.id
        )
        if result['ok']:
            self.notification_service.create_order_notification(
                user.id, OrderStatus.PENDING, result['data']['id']
            )
        return result

    def update_status(self, order_id: int, status: str) -> Dict[str, Any]:
        """
        Cambia el estado de un pedido y notifica al cliente.

        Args:
            order_id: Pedido
            status: Nuevo estado (valor de OrderStatus)
        """
        try:
            new_status = OrderStatus(status)
        except ValueError:
            return fail(ERROR_VALIDATION, Toast.error('상태 변경 실패', f'알 수 없는 주문 상태: {status}'))

        def action():
            updated = self.order_repo.update_status(order_id, new_status.value)
            if updated is None:
                raise ServiceError(ERROR_NOT_FOUND, Toast.error('주문을 찾을 수 없습니다'))
            return updated

        result = self._mutate(
            'update_order_status',
            action,
            params=lambda order: {'order_id': order_id, 'user_id': order.get('user_id')},
            success_toast=Toast('주문 상태가 변경되었습니다', f'주문번호: {order_id}'),
            error_toast=Toast.error('상태 변경 실패', '주문 상태 변경 중 오류가 발생했습니다.'),
            log_tag='ERROR PEDIDO',
            scope=order_id
        )
        if result['ok']:
            self.notification_service.create_order_notification(
                result['data']['user_id'], new_status, order_id
            )
        return result
