# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Este módulo proporciona una forma centralizada de obtener instancias
# de repositorios y servicios. Facilita:
#   - Inyección de dependencias
#   - Testing (se pueden mockear los repositorios)
#   - Migración gradual (cambiar repos sin tocar servicios)
#
# ═══════════════════════════════════════════════════════════════════════════════
# MIGRACIÓN AL BACKEND ADMINISTRADO - INSTRUCCIONES
# ═══════════════════════════════════════════════════════════════════════════════
#
# 1. Crear nuevas clases de repositorio que implementen las interfaces de
#    repositories/interfaces.py (IOrderRepository, IReviewRepository, ...)
# 2. Cambiar las importaciones en este archivo
# 3. Los servicios NO requieren cambios
#
# Todos los servicios comparten UNA caché de consultas y UN registro de
# mutaciones pendientes. El grafo de invalidación se valida al crear
# el contenedor: si está incompleto la aplicación no arranca.
# ==============================================================================

import os
from typing import Optional

from storefront.query_cache import QueryCache, MutationTracker, validate_invalidation_graph

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITORIOS - Capa de persistencia (JSON ahora, backend después)
# ═══════════════════════════════════════════════════════════════════════════════
from storefront.repositories import (
    UserRepository,
    ProductRepository,
    CategoryRepository,
    CartRepository,
    OrderRepository,
    FavoriteRepository,
    ReviewRepository,
    NotificationRepository,
    DeliveryRepository,
    RefundRepository,
)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIOS - Capa de lógica de negocio
# ═══════════════════════════════════════════════════════════════════════════════
from storefront.services import (
    AuthService,
    ProductService,
    CartService,
    FavoriteService,
    ReviewService,
    NotificationService,
    OrderService,
    DeliveryService,
    RefundService,
)


def _env_flag(name: str, default: str = '1') -> bool:
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Implementa el patrón Singleton para asegurar una única instancia
    de cada repositorio y servicio.

    Uso:
        container = AppContainer(base_path='/path/to/data')
        order_service = container.order_service
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, base_path: str = None, backend_configured: bool = None):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, base_path: str = None, backend_configured: bool = None):
        """
        Inicializa el contenedor.

        Args:
            base_path: Directorio de datos (por defecto STOREFRONT_DATA_DIR)
            backend_configured: Bandera del backend (por defecto STOREFRONT_BACKEND_ENABLED)

        Raises:
            InvalidationGraphError: Si el grafo de invalidación está incompleto
        """
        if self._initialized:
            return

        validate_invalidation_graph()

        self._base_path = base_path or os.environ.get(
            'STOREFRONT_DATA_DIR',
            os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')
        )
        if backend_configured is None:
            backend_configured = _env_flag('STOREFRONT_BACKEND_ENABLED')
        self.backend_configured = backend_configured

        if not self.backend_configured:
            print("[ADVERTENCIA] Backend no configurado: las escrituras quedan deshabilitadas")

        self.query_cache = QueryCache()
        self.mutation_tracker = MutationTracker()

        self._reset_slots()
        self._initialized = True

    def _reset_slots(self) -> None:
        # Repositorios (lazy loading)
        self._user_repo = None
        self._product_repo = None
        self._category_repo = None
        self._cart_repo = None
        self._order_repo = None
        self._favorite_repo = None
        self._review_repo = None
        self._notification_repo = None
        self._delivery_repo = None
        self._refund_repo = None

        # Servicios (lazy loading)
        self._auth_service = None
        self._product_service = None
        self._cart_service = None
        self._favorite_service = None
        self._review_service = None
        self._notification_service = None
        self._order_service = None
        self._delivery_service = None
        self._refund_service = None

    @property
    def base_path(self) -> str:
        return self._base_path

    def _service_kwargs(self) -> dict:
        return {
            'cache': self.query_cache,
            'tracker': self.mutation_tracker,
            'backend_configured': self.backend_configured,
        }

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def user_repo(self) -> UserRepository:
        if self._user_repo is None:
            self._user_repo = UserRepository(self._base_path)
        return self._user_repo

    @property
    def product_repo(self) -> ProductRepository:
        if self._product_repo is None:
            self._product_repo = ProductRepository(self._base_path)
        return self._product_repo

    @property
    def category_repo(self) -> CategoryRepository:
        if self._category_repo is None:
            self._category_repo = CategoryRepository(self._base_path)
        return self._category_repo

    @property
    def cart_repo(self) -> CartRepository:
        if self._cart_repo is None:
            self._cart_repo = CartRepository(self._base_path)
        return self._cart_repo

    @property
    def order_repo(self) -> OrderRepository:
        if self._order_repo is None:
            self._order_repo = OrderRepository(self._base_path)
        return self._order_repo

    @property
    def favorite_repo(self) -> FavoriteRepository:
        if self._favorite_repo is None:
            self._favorite_repo = FavoriteRepository(self._base_path)
        return self._favorite_repo

    @property
    def review_repo(self) -> ReviewRepository:
        if self._review_repo is None:
            self._review_repo = ReviewRepository(self._base_path)
        return self._review_repo

    @property
    def notification_repo(self) -> NotificationRepository:
        if self._notification_repo is None:
            self._notification_repo = NotificationRepository(self._base_path)
        return self._notification_repo

    @property
    def delivery_repo(self) -> DeliveryRepository:
        if self._delivery_repo is None:
            self._delivery_repo = DeliveryRepository(self._base_path)
        return self._delivery_repo

    @property
    def refund_repo(self) -> RefundRepository:
        if self._refund_repo is None:
            self._refund_repo = RefundRepository(self._base_path)
        return self._refund_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def auth_service(self) -> AuthService:
        if self._auth_service is None:
            self._auth_service = AuthService(self.user_repo, **self._service_kwargs())
        return self._auth_service

    @property
    def product_service(self) -> ProductService:
        if self._product_service is None:
            self._product_service = ProductService(
                self.product_repo,
                self.category_repo,
                **self._service_kwargs()
            )
        return self._product_service

    @property
    def cart_service(self) -> CartService:
        if self._cart_service is None:
            self._cart_service = CartService(self.cart_repo, self.product_repo, **self._service_kwargs())
        return self._cart_service

    @property
    def favorite_service(self) -> FavoriteService:
        if self._favorite_service is None:
            self._favorite_service = FavoriteService(
                self.favorite_repo,
                self.product_repo,
                **self._service_kwargs()
            )
        return self._favorite_service

    @property
    def review_service(self) -> ReviewService:
        if self._review_service is None:
            self._review_service = ReviewService(self.review_repo, self.order_repo, **self._service_kwargs())
        return self._review_service

    @property
    def notification_service(self) -> NotificationService:
        if self._notification_service is None:
            self._notification_service = NotificationService(self.notification_repo, **self._service_kwargs())
        return self._notification_service

    @property
    def order_service(self) -> OrderService:
        if self._order_service is None:
            self._order_service = OrderService(
                self.order_repo,
                self.product_repo,
                self.cart_repo,
                self.notification_service,
                **self._service_kwargs()
            )
        return self._order_service

    @property
    def delivery_service(self) -> DeliveryService:
        if self._delivery_service is None:
            self._delivery_service = DeliveryService(self.delivery_repo, self.order_repo, **self._service_kwargs())
        return self._delivery_service

    @property
    def refund_service(self) -> RefundService:
        if self._refund_service is None:
            self._refund_service = RefundService(self.refund_repo, self.order_repo, **self._service_kwargs())
        return self._refund_service

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """
        Reinicia todas las instancias y vacía la caché.
        Útil para testing o para recargar datos.
        """
        self._reset_slots()
        self.query_cache.clear()

    @classmethod
    def get_instance(cls, base_path: str = None, backend_configured: bool = None) -> 'AppContainer':
        """
        Obtiene la instancia singleton del contenedor.

        Args:
            base_path: Directorio de datos (solo se usa en la primera llamada)
            backend_configured: Bandera del backend (solo primera llamada)
        """
        if cls._instance is None:
            return cls(base_path, backend_configured)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


def get_container(base_path: str = None, backend_configured: bool = None) -> AppContainer:
    """
    Obtiene el contenedor de dependencias global.

    Args:
        base_path: Directorio de datos
        backend_configured: Bandera del backend

    Returns:
        Instancia del contenedor
    """
    return AppContainer.get_instance(base_path, backend_configured)
