# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto de la tienda.
# Diseñadas para ser independientes del mecanismo de persistencia
# (JSON ahora, backend administrado después).
# ==============================================================================

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Union
from enum import Enum
from datetime import datetime, timezone


def now_iso() -> str:
    """Timestamp ISO (UTC) usado en todos los registros."""
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


# ==============================================================================
# ENUMERACIONES - Estados y tipos válidos
# ==============================================================================

class OrderStatus(str, Enum):
    """Estados posibles de un pedido."""
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUND_REQUESTED = "refund_requested"  # Lo fija la solicitud de reembolso


class NotificationType(str, Enum):
    """Tipos de notificación."""
    COMMENT = "comment"
    LIKE = "like"
    ORDER = "order"
    SYSTEM = "system"


class DeliveryStatus(str, Enum):
    """
    Estados del seguimiento de envío.

    pending → processing → shipped/in_transit → out_for_delivery → delivered
    Alternativas terminales: failed, returned.
    UNKNOWN es el comodín obligatorio para cualquier valor no reconocido.
    """
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    FAILED = "failed"
    RETURNED = "returned"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str]) -> 'DeliveryStatus':
        """Convierte un string (cualquier casing) en estado, sin lanzar errores."""
        if not value:
            return cls.UNKNOWN
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class RefundStatus(str, Enum):
    """Estados de una solicitud de reembolso (solo PENDING se crea aquí)."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ToastVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


# Umbral de "pocas unidades"
LOW_STOCK_THRESHOLD = 5

# Rango válido de puntuación de reseñas
MIN_RATING = 1
MAX_RATING = 5


# ==============================================================================
# MENSAJES AL USUARIO
# ==============================================================================

@dataclass
class Toast:
    """
    Mensaje visible para el usuario que acompaña a cada resultado.

    Attributes:
        title: Título corto
        description: Detalle
        variant: 'default' o 'destructive'
    """
    title: str
    description: str = ''
    variant: ToastVariant = ToastVariant.DEFAULT

    @property
    def is_error(self) -> bool:
        return self.variant == ToastVariant.DESTRUCTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'description': self.description,
            'variant': self.variant.value if isinstance(self.variant, Enum) else self.variant
        }

    @classmethod
    def error(cls, title: str, description: str = '') -> 'Toast':
        return cls(title, description, ToastVariant.DESTRUCTIVE)


# ==============================================================================
# ENTIDADES DE USUARIO
# ==============================================================================

@dataclass
class User:
    """
    Representa un usuario de la tienda.

    Attributes:
        id: Identificador numérico
        username: Nombre de usuario único
        email: Correo electrónico
        password_hash: Hash de la contraseña (nunca texto plano)
        is_admin: Acceso al panel de administración
        points, coupons, total_orders, total_spent: Contadores agregados
    """
    id: int
    username: str
    email: str = ''
    password_hash: str = ''
    first_name: str = ''
    last_name: str = ''
    is_admin: bool = False
    points: int = 0
    coupons: int = 0
    total_orders: int = 0
    total_spent: float = 0.0
    created_at: str = field(default_factory=now_iso)

    @property
    def display_name(self) -> str:
        """Nombre visible: 'nombre apellido' o el username si no hay nombre."""
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.username

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia (incluye el hash)."""
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'password': self.password_hash,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'is_admin': self.is_admin,
            'points': self.points,
            'coupons': self.coupons,
            'total_orders': self.total_orders,
            'total_spent': self.total_spent,
            'created_at': self.created_at,
        }

    def to_session_dict(self) -> Dict[str, Any]:
        """
        Copia serializada para la sesión del navegador.
        NUNCA incluye el hash de la contraseña.
        """
        return {
            'id': self.id,
            'name': self.display_name,
            'username': self.username,
            'email': self.email,
            'points': self.points,
            'coupons': self.coupons,
            'totalOrders': self.total_orders,
            'totalSpent': self.total_spent,
            'isAdmin': self.is_admin,
            'firstName': self.first_name,
            'lastName': self.last_name or '',
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        """Crea instancia desde diccionario."""
        return cls(
            id=int(data.get('id', 0)),
            username=data.get('username', ''),
            email=data.get('email', ''),
            password_hash=data.get('password', ''),
            first_name=data.get('first_name') or '',
            last_name=data.get('last_name') or '',
            is_admin=bool(data.get('is_admin', False)),
            points=data.get('points', 0),
            coupons=data.get('coupons', 0),
            total_orders=data.get('total_orders', 0),
            total_spent=data.get('total_spent', 0.0),
            created_at=data.get('created_at') or now_iso(),
        )


# ==============================================================================
# ENTIDADES DE CATÁLOGO
# ==============================================================================

@dataclass
class Category:
    id: int
    name: str
    name_ko: str = ''
    is_active: bool = True
    sort_order: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'name_ko': self.name_ko,
            'is_active': self.is_active,
            'sort_order': self.sort_order,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Category':
        return cls(
            id=int(data.get('id', 0)),
            name=data.get('name', ''),
            name_ko=data.get('name_ko', ''),
            is_active=bool(data.get('is_active', True)),
            sort_order=data.get('sort_order', 0),
        )


@dataclass
class Product:
    """
    Producto del catálogo.

    El stock es opcional: los productos bajo pedido no llevan inventario
    y nunca se consideran agotados.
    """
    id: int
    name: str
    name_ko: str = ''
    base_price: float = 0.0
    description: str = ''
    description_ko: str = ''
    category_id: Optional[int] = None
    is_available: bool = True
    is_featured: bool = False
    stock: Optional[int] = None
    like_count: int = 0
    review_count: int = 0
    image_url: str = ''
    created_at: str = field(default_factory=now_iso)

    @property
    def is_out_of_stock(self) -> bool:
        """Agotado solo si el stock está definido y es 0 o menos."""
        return self.stock is not None and self.stock <= 0

    @property
    def is_low_stock(self) -> bool:
        return self.stock is not None and 0 < self.stock <= LOW_STOCK_THRESHOLD

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        return {
            'id': self.id,
            'name': self.name,
            'name_ko': self.name_ko,
            'description': self.description,
            'description_ko': self.description_ko,
            'base_price': self.base_price,
            'category_id': self.category_id,
            'is_available': self.is_available,
            'is_featured': self.is_featured,
            'stock': self.stock,
            'like_count': self.like_count,
            'review_count': self.review_count,
            'image_url': self.image_url,
            'created_at': self.created_at,
        }

    def to_display_dict(self) -> Dict[str, Any]:
        """Diccionario para la vista, con banderas de stock calculadas."""
        d = self.to_dict()
        d['isOutOfStock'] = self.is_out_of_stock
        d['isLowStock'] = self.is_low_stock
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """Crea instancia desde diccionario."""
        stock = data.get('stock')
        return cls(
            id=int(data.get('id', 0)),
            name=data.get('name', ''),
            name_ko=data.get('name_ko', ''),
            base_price=float(data.get('base_price', 0) or 0),
            description=data.get('description') or '',
            description_ko=data.get('description_ko') or '',
            category_id=data.get('category_id'),
            is_available=bool(data.get('is_available', True)),
            is_featured=bool(data.get('is_featured', False)),
            stock=int(stock) if stock is not None else None,
            like_count=data.get('like_count', 0),
            review_count=data.get('review_count', 0),
            image_url=data.get('image_url') or '',
            created_at=data.get('created_at') or now_iso(),
        )


# ==============================================================================
# CARRITO Y PEDIDOS
# ==============================================================================

@dataclass
class CartItem:
    """Item del carrito de un usuario (uno por producto)."""
    id: int
    user_id: int
    product_id: int
    quantity: int = 1
    customization_options: Optional[Dict[str, Any]] = None
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'product_id': self.product_id,
            'quantity': self.quantity,
            'customization_options': self.customization_options,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }


@dataclass
class OrderItem:
    """Línea de pedido."""
    product_id: int
    quantity: int
    price: float
    options: Optional[Dict[str, Any]] = None

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'quantity': self.quantity,
            'price': self.price,
            'options': self.options,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OrderItem':
        return cls(
            product_id=int(data.get('product_id', 0)),
            quantity=int(data.get('quantity', 0)),
            price=float(data.get('price', 0) or 0),
            options=data.get('options'),
        )


@dataclass
class Order:
    """
    Pedido de un cliente.

    Attributes:
        id: Número de pedido
        user_id: Dueño del pedido
        status: Estado actual (ver OrderStatus)
        total_amount: Monto total
        items: Líneas del pedido
    """
    id: int
    user_id: int
    status: Union[OrderStatus, str] = OrderStatus.PENDING
    total_amount: float = 0.0
    shipping_address: str = ''
    payment_method: str = ''
    items: List[OrderItem] = field(default_factory=list)
    created_at: str = field(default_factory=now_iso)

    def contains_product(self, product_id: int) -> bool:
        return any(item.product_id == product_id for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'status': self.status.value if isinstance(self.status, Enum) else self.status,
            'total_amount': round(self.total_amount, 2),
            'shipping_address': self.shipping_address,
            'payment_method': self.payment_method,
            'items': [item.to_dict() for item in self.items],
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Order':
        """Crea instancia desde diccionario."""
        status_str = data.get('status', 'pending')
        try:
            status = OrderStatus(status_str)
        except ValueError:
            # Estado desconocido: se conserva el valor guardado
            status = status_str
        return cls(
            id=int(data.get('id', 0)),
            user_id=int(data.get('user_id', 0)),
            status=status,
            total_amount=float(data.get('total_amount', 0) or 0),
            shipping_address=data.get('shipping_address') or '',
            payment_method=data.get('payment_method') or '',
            items=[OrderItem.from_dict(i) for i in data.get('items', [])],
            created_at=data.get('created_at') or now_iso(),
        )


# ==============================================================================
# INTERACCIONES: FAVORITOS Y RESEÑAS
# ==============================================================================

@dataclass
class Favorite:
    """Par (usuario, producto). Ser favorito es pertenecer al conjunto."""
    user_id: int
    product_id: int
    id: Optional[int] = None
    created_at: str = field(default_factory=now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'product_id': self.product_id,
            'created_at': self.created_at,
        }


@dataclass
class Review:
    """Reseña de un producto. Una por (usuario, producto)."""
    id: int
    user_id: int
    product_id: int
    rating: int
    content: str
    created_at: str = field(default_factory=now_iso)
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'product_id': self.product_id,
            'rating': self.rating,
            'content': self.content,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }


# ==============================================================================
# NOTIFICACIONES
# ==============================================================================

@dataclass
class Notification:
    """
    Notificación para un usuario.

    Transición única: no leída → leída. No hay vuelta atrás.
    """
    id: int
    user_id: int
    type: NotificationType
    title: str
    message: str
    is_read: bool = False
    related_id: Optional[int] = None
    related_type: Optional[str] = None
    related_url: Optional[str] = None
    created_at: str = field(default_factory=now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'type': self.type.value if isinstance(self.type, Enum) else self.type,
            'title': self.title,
            'message': self.message,
            'is_read': self.is_read,
            'related_id': self.related_id,
            'related_type': self.related_type,
            'related_url': self.related_url,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Notification':
        try:
            ntype = NotificationType(data.get('type', 'system'))
        except ValueError:
            ntype = NotificationType.SYSTEM
        return cls(
            id=int(data.get('id', 0)),
            user_id=int(data.get('user_id', 0)),
            type=ntype,
            title=data.get('title', ''),
            message=data.get('message', ''),
            is_read=bool(data.get('is_read', False)),
            related_id=data.get('related_id'),
            related_type=data.get('related_type'),
            related_url=data.get('related_url'),
            created_at=data.get('created_at') or now_iso(),
        )


# ==============================================================================
# ENVÍOS Y REEMBOLSOS
# ==============================================================================

@dataclass
class DeliveryTracking:
    """Seguimiento de envío de un pedido."""
    id: int
    order_id: int
    courier: str = ''
    tracking_number: str = ''
    status: str = DeliveryStatus.PENDING.value
    estimated_delivery: Optional[str] = None
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'order_id': self.order_id,
            'courier': self.courier,
            'tracking_number': self.tracking_number,
            'status': self.status,
            'estimated_delivery': self.estimated_delivery,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }


@dataclass
class RefundRequest:
    """
    Solicitud de reembolso.

    none → pending (se crea aquí) → approved | rejected (lo resuelve el backoffice).
    """
    id: int
    order_id: int
    user_id: int
    reason: str
    description: str = ''
    amount: float = 0.0
    status: RefundStatus = RefundStatus.PENDING
    requested_at: str = field(default_factory=now_iso)
    resolved_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'order_id': self.order_id,
            'user_id': self.user_id,
            'reason': self.reason,
            'description': self.description,
            'amount': self.amount,
            'status': self.status.value if isinstance(self.status, Enum) else self.status,
            'requested_at': self.requested_at,
            'resolved_at': self.resolved_at,
        }
