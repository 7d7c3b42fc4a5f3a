# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Esta capa contiene TODA la lógica de negocio de la aplicación.
#
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Las lecturas pasan por la caché de consultas
# 3. Cada escritura invalida el conjunto de claves declarado en el grafo
# 4. Las rutas (controllers) solo llaman a servicios
#
# ESTRUCTURA:
# ├── base.py                 → _query / _mutate, códigos de error
# ├── auth_service.py         → Registro, login, SessionContext
# ├── product_service.py      → Catálogo
# ├── cart_service.py         → Carrito (verificaciones de stock)
# ├── favorite_service.py     → Favoritos
# ├── review_service.py       → Reseñas (compra previa, sin duplicados)
# ├── order_service.py        → Pedidos
# ├── notification_service.py → Notificaciones
# ├── delivery_service.py     → Seguimiento de envíos
# └── refund_service.py       → Solicitudes de reembolso
# ==============================================================================

from storefront.services.base import BaseService, ServiceError, ERROR_STATUS
from storefront.services.auth_service import AuthService, SessionContext
from storefront.services.product_service import ProductService
from storefront.services.cart_service import CartService
from storefront.services.favorite_service import FavoriteService
from storefront.services.review_service import ReviewService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.delivery_service import DeliveryService
from storefront.services.refund_service import RefundService

__all__ = [
    'BaseService',
    'ServiceError',
    'ERROR_STATUS',
    'AuthService',
    'SessionContext',
    'ProductService',
    'CartService',
    'FavoriteService',
    'ReviewService',
    'NotificationService',
    'OrderService',
    'DeliveryService',
    'RefundService',
]
