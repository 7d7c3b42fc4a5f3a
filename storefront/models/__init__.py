# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos de la tienda
# ==============================================================================
# Este módulo define todas las entidades del dominio usando dataclasses.
# Independientes del mecanismo de persistencia (JSON ahora, backend después).
# ==============================================================================

from .entities import (
    # Usuarios
    User,

    # Catálogo
    Category,
    Product,
    LOW_STOCK_THRESHOLD,

    # Carrito y pedidos
    CartItem,
    Order,
    OrderItem,
    OrderStatus,

    # Interacciones
    Favorite,
    Review,
    MIN_RATING,
    MAX_RATING,

    # Notificaciones
    Notification,
    NotificationType,

    # Envíos y reembolsos
    DeliveryTracking,
    DeliveryStatus,
    RefundRequest,
    RefundStatus,

    # Mensajes
    Toast,
    ToastVariant,
    now_iso,
)

__all__ = [
    'User',
    'Category',
    'Product',
    'LOW_STOCK_THRESHOLD',
    'CartItem',
    'Order',
    'OrderItem',
    'OrderStatus',
    'Favorite',
    'Review',
    'MIN_RATING',
    'MAX_RATING',
    'Notification',
    'NotificationType',
    'DeliveryTracking',
    'DeliveryStatus',
    'RefundRequest',
    'RefundStatus',
    'Toast',
    'ToastVariant',
    'now_iso',
]
