# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Los repositorios encapsulan el acceso a las "tablas" del backend.
# Hoy son archivos JSON; mañana el cliente del backend administrado.
#
# Los servicios dependen de las interfaces de interfaces.py.
# ==============================================================================

from .base import BaseRepository, DictRepository, ListRepository
from .user_repository import UserRepository
from .product_repository import ProductRepository, CategoryRepository
from .cart_repository import CartRepository
from .order_repository import OrderRepository
from .favorite_repository import FavoriteRepository
from .review_repository import ReviewRepository
from .notification_repository import NotificationRepository
from .delivery_repository import DeliveryRepository
from .refund_repository import RefundRepository

# Interfaces (Protocolos)
from .interfaces import (
    IUserRepository,
    IProductRepository,
    ICategoryRepository,
    ICartRepository,
    IOrderRepository,
    IFavoriteRepository,
    IReviewRepository,
    INotificationRepository,
    IDeliveryRepository,
    IRefundRepository,
)

__all__ = [
    # Base
    'BaseRepository',
    'DictRepository',
    'ListRepository',
    # Implementaciones JSON
    'UserRepository',
    'ProductRepository',
    'CategoryRepository',
    'CartRepository',
    'OrderRepository',
    'FavoriteRepository',
    'ReviewRepository',
    'NotificationRepository',
    'DeliveryRepository',
    'RefundRepository',
    # Interfaces
    'IUserRepository',
    'IProductRepository',
    'ICategoryRepository',
    'ICartRepository',
    'IOrderRepository',
    'IFavoriteRepository',
    'IReviewRepository',
    'INotificationRepository',
    'IDeliveryRepository',
    'IRefundRepository',
]
