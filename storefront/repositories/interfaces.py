# ==============================================================================
# INTERFACES DE REPOSITORIOS - PREPARADO PARA BACKEND ADMINISTRADO
# ==============================================================================
#
# Los servicios dependen de estos protocolos, NO de las clases JSON.
#
# MIGRACIÓN AL BACKEND:
# 1. Crear nuevas clases: BackendOrderRepository, BackendReviewRepository, etc.
# 2. Hacer que implementen estas interfaces
# 3. Cambiar instanciación en app_container.py
# 4. Los servicios NO requieren cambios
#
# ==============================================================================

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


# ==============================================================================
# USUARIOS Y CATÁLOGO
# ==============================================================================

@runtime_checkable
class IUserRepository(Protocol):

    def get_user(self, user_id: int) -> Optional[Dict[str, Any]]:
        ...

    def get_user_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        ...

    def user_exists(self, username: str) -> bool:
        ...

    def create_user(self, data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def update_user(self, user_id: int, updates: Dict[str, Any]) -> bool:
        ...


@runtime_checkable
class IProductRepository(Protocol):

    def list_products(self) -> List[Dict[str, Any]]:
        ...

    def get_product(self, product_id: int) -> Optional[Dict[str, Any]]:
        ...

    def save_product(self, data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @property
    def write_lock(self) -> Any:
        """Lock que serializa verificar stock y descontar."""
        ...

    def decrement_stock(self, product_id: int, quantity: int) -> Optional[int]:
        ...

    def restore_stock(self, product_id: int, quantity: int) -> Optional[int]:
        ...


@runtime_checkable
class ICategoryRepository(Protocol):

    def list_categories(self, active_only: bool = True) -> List[Dict[str, Any]]:
        ...


# ==============================================================================
# CARRITO Y PEDIDOS
# ==============================================================================

@runtime_checkable
class ICartRepository(Protocol):

    def get_items(self, user_id: int) -> List[Dict[str, Any]]:
        ...

    def get_item(self, user_id: int, item_id: int) -> Optional[Dict[str, Any]]:
        ...

    def add_item(self, user_id: int, product_id: int, quantity: int,
                 options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        ...

    def set_quantity(self, user_id: int, item_id: int, quantity: int) -> Optional[Dict[str, Any]]:
        ...

    def remove_item(self, user_id: int, product_id: int) -> int:
        ...

    def clear(self, user_id: int) -> int:
        ...


@runtime_checkable
class IOrderRepository(Protocol):

    def create_order(self, data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def get_order(self, order_id: int) -> Optional[Dict[str, Any]]:
        ...

    def get_orders_by_user(self, user_id: int) -> List[Dict[str, Any]]:
        ...

    def update_status(self, order_id: int, status: str) -> Optional[Dict[str, Any]]:
        ...

    def has_purchased(self, user_id: int, product_id: int) -> bool:
        ...


# ==============================================================================
# INTERACCIONES
# ==============================================================================

@runtime_checkable
class IFavoriteRepository(Protocol):

    def get_favorites(self, user_id: int) -> List[Dict[str, Any]]:
        ...

    def exists(self, user_id: int, product_id: int) -> bool:
        ...

    def add(self, user_id: int, product_id: int) -> Dict[str, Any]:
        ...

    def remove(self, user_id: int, product_id: int) -> int:
        ...


@runtime_checkable
class IReviewRepository(Protocol):

    @property
    def write_lock(self) -> Any:
        """Lock que serializa verificar-e-insertar."""
        ...

    def get_review(self, review_id: int) -> Optional[Dict[str, Any]]:
        ...

    def get_product_reviews(self, product_id: int) -> List[Dict[str, Any]]:
        ...

    def get_user_review(self, user_id: int, product_id: int) -> Optional[Dict[str, Any]]:
        ...

    def create_review(self, data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def update_review(self, review_id: int, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    def delete_review(self, review_id: int) -> int:
        ...


# ==============================================================================
# NOTIFICACIONES, ENVÍOS Y REEMBOLSOS
# ==============================================================================

@runtime_checkable
class INotificationRepository(Protocol):

    def get_notification(self, notification_id: int) -> Optional[Dict[str, Any]]:
        ...

    def get_notifications(self, user_id: int) -> List[Dict[str, Any]]:
        ...

    def create_notification(self, data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def mark_as_read(self, notification_id: int) -> Optional[Dict[str, Any]]:
        ...

    def mark_all_as_read(self, user_id: int) -> int:
        ...


@runtime_checkable
class IDeliveryRepository(Protocol):

    def get_tracking(self, order_id: int) -> Optional[Dict[str, Any]]:
        ...

    def get_all_trackings(self) -> List[Dict[str, Any]]:
        ...

    def create_tracking(self, data: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def update_tracking(self, tracking_id: int, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...


@runtime_checkable
class IRefundRepository(Protocol):

    @property
    def write_lock(self) -> Any:
        ...

    def get_request_for_order(self, order_id: int) -> Optional[Dict[str, Any]]:
        ...

    def get_user_requests(self, user_id: int) -> List[Dict[str, Any]]:
        ...

    def create_request(self, data: Dict[str, Any]) -> Dict[str, Any]:
        ...
