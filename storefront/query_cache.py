# ==============================================================================
# CACHÉ DE CONSULTAS - Deduplicación, ventanas de frescura e invalidación
# ==============================================================================
# Cada lectura de los servicios pasa por aquí, identificada por una clave
# en forma de tupla: ('orders', user_id), ('product_reviews', product_id), ...
#
# ═══════════════════════════════════════════════════════════════════════════════
# REGLAS
# ═══════════════════════════════════════════════════════════════════════════════
#
# 1. Una sola consulta en vuelo por clave (lock por clave).
# 2. Una entrada es "vieja" si superó su ventana de frescura o si fue
#    invalidada; la siguiente lectura la vuelve a pedir.
# 3. Si la nueva consulta falla, se mantienen los datos viejos junto al error.
# 4. Cada mutación invalida un conjunto FIJO de prefijos de clave, declarado
#    en INVALIDATION_GRAPH. El grafo se valida al iniciar el contenedor.
# ==============================================================================

import re
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from storefront.models import now_iso


# ═══════════════════════════════════════════════════════════════════════════════
# VENTANAS DE FRESCURA (segundos)
# ═══════════════════════════════════════════════════════════════════════════════

CACHE_TIMEOUT_SHORT = 60
CACHE_TIMEOUT_MEDIUM = 120
CACHE_TIMEOUT_LONG = 300
CACHE_TIMEOUT_VERY_LONG = 600

STALE_TIMES: Dict[str, int] = {
    'products': CACHE_TIMEOUT_MEDIUM,
    'product': CACHE_TIMEOUT_MEDIUM,
    'categories': CACHE_TIMEOUT_VERY_LONG,
    'orders': CACHE_TIMEOUT_LONG,
    'order': CACHE_TIMEOUT_LONG,
    'cart': CACHE_TIMEOUT_SHORT,
    'favorites': CACHE_TIMEOUT_LONG,
    'is_favorite': CACHE_TIMEOUT_LONG,
    'product_reviews': CACHE_TIMEOUT_LONG,
    'user_review': CACHE_TIMEOUT_LONG,
    'notifications': CACHE_TIMEOUT_SHORT,
    'delivery_tracking': CACHE_TIMEOUT_LONG,
    'delivery_trackings': CACHE_TIMEOUT_LONG,
    'refund_request_check': CACHE_TIMEOUT_LONG,
    'refund_requests': CACHE_TIMEOUT_LONG,
    'session': CACHE_TIMEOUT_SHORT,
}

DEFAULT_STALE_TIME = CACHE_TIMEOUT_SHORT

# Raíces de clave registradas: toda clave de consulta empieza por una de estas
QUERY_ROOTS = frozenset(STALE_TIMES)


# ═══════════════════════════════════════════════════════════════════════════════
# GRAFO DE INVALIDACIÓN
# ═══════════════════════════════════════════════════════════════════════════════
# Parámetros que cada mutación aporta para rellenar los {placeholders}.
# Las claves de este diccionario son el conjunto completo de mutaciones.

MUTATION_PARAMS: Dict[str, Tuple[str, ...]] = {
    'add_to_cart': ('user_id', 'product_id'),
    'update_cart_quantity': ('user_id', 'item_id'),
    'remove_from_cart': ('user_id', 'product_id'),
    'clear_cart': ('user_id',),
    'create_order': ('user_id',),
    'update_order_status': ('order_id', 'user_id'),
    'toggle_favorite': ('user_id', 'product_id'),
    'create_review': ('user_id', 'product_id'),
    'update_review': ('review_id', 'product_id'),
    'delete_review': ('review_id', 'product_id'),
    'mark_notification_read': ('notification_id', 'user_id'),
    'mark_all_notifications_read': ('user_id',),
    'create_notification': ('user_id',),
    'create_delivery_tracking': ('order_id',),
    'update_delivery_tracking': ('tracking_id', 'order_id'),
    'create_refund_request': ('order_id', 'user_id'),
}

INVALIDATION_GRAPH: Dict[str, List[Tuple[str, ...]]] = {
    'add_to_cart': [('cart', '{user_id}')],
    'update_cart_quantity': [('cart', '{user_id}')],
    'remove_from_cart': [('cart', '{user_id}')],
    'clear_cart': [('cart', '{user_id}')],
    'create_order': [
        ('orders',),
        ('order',),
        ('cart',),
        ('products',),
        ('product',),
        ('notifications', '{user_id}'),
    ],
    'update_order_status': [
        ('orders',),
        ('order', '{order_id}'),
        ('notifications', '{user_id}'),
    ],
    'toggle_favorite': [
        ('favorites', '{user_id}'),
        ('is_favorite', '{user_id}'),
    ],
    'create_review': [('product_reviews', '{product_id}'), ('user_review',)],
    'update_review': [('product_reviews', '{product_id}'), ('user_review',)],
    'delete_review': [('product_reviews', '{product_id}'), ('user_review',)],
    'mark_notification_read': [('notifications', '{user_id}')],
    'mark_all_notifications_read': [('notifications', '{user_id}')],
    'create_notification': [('notifications',)],
    'create_delivery_tracking': [('delivery_tracking',), ('delivery_trackings',)],
    'update_delivery_tracking': [('delivery_tracking',), ('delivery_trackings',)],
    'create_refund_request': [
        ('refund_request_check', '{order_id}'),
        ('refund_requests',),
        ('orders',),
        ('order', '{order_id}'),
    ],
}

_PLACEHOLDER = re.compile(r'^\{(\w+)\}$')


class InvalidationGraphError(Exception):
    """El grafo de invalidación está incompleto o referencia claves desconocidas."""
    pass


def validate_invalidation_graph(
    graph: Dict[str, List[Tuple[str, ...]]] = None,
    mutation_params: Dict[str, Tuple[str, ...]] = None,
    query_roots: Iterable[str] = None
) -> None:
    """
    Verifica que el grafo cubra todas las mutaciones declaradas.

    Reglas:
        - Cada mutación tiene entrada (aunque sea vacía no se permite).
        - Cada prefijo empieza por una raíz de consulta registrada.
        - Cada {placeholder} es un parámetro conocido de la mutación.

    Raises:
        InvalidationGraphError: Con la lista de problemas encontrados
    """
    graph = INVALIDATION_GRAPH if graph is None else graph
    mutation_params = MUTATION_PARAMS if mutation_params is None else mutation_params
    roots = QUERY_ROOTS if query_roots is None else frozenset(query_roots)

    problems = []
    for kind, params in mutation_params.items():
        prefixes = graph.get(kind)
        if not prefixes:
            problems.append(f"mutación sin invalidaciones: {kind}")
            continue
        for prefix in prefixes:
            if not prefix or prefix[0] not in roots:
                problems.append(f"{kind}: raíz desconocida {prefix!r}")
                continue
            for part in prefix[1:]:
                match = _PLACEHOLDER.match(str(part))
                if match and match.group(1) not in params:
                    problems.append(f"{kind}: parámetro desconocido {part}")

    for kind in graph:
        if kind not in mutation_params:
            problems.append(f"mutación no declarada en el grafo: {kind}")

    if problems:
        raise InvalidationGraphError('; '.join(problems))


def resolve_invalidations(kind: str, params: Dict[str, Any]) -> List[Tuple[Any, ...]]:
    """
    Rellena los placeholders de los prefijos de una mutación.

    Si un parámetro falta (None), el prefijo se corta en ese punto y la
    invalidación se vuelve más amplia, nunca más estrecha.

    Ejemplo:
        resolve_invalidations('toggle_favorite', {'user_id': 3})
        -> [('favorites', 3), ('is_favorite', 3)]
    """
    resolved = []
    for prefix in INVALIDATION_GRAPH[kind]:
        key = [prefix[0]]
        for part in prefix[1:]:
            match = _PLACEHOLDER.match(str(part))
            if not match:
                key.append(part)
                continue
            value = params.get(match.group(1))
            if value is None:
                break
            key.append(value)
        resolved.append(tuple(key))
    return resolved


# ═══════════════════════════════════════════════════════════════════════════════
# RESULTADOS Y ENTRADAS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class QueryResult:
    """
    Resultado de una lectura.

    Attributes:
        data: Datos (pueden ser viejos si la última consulta falló)
        is_loading: Hay una consulta en vuelo y todavía no hay datos
        error: Mensaje del último error, o None
        is_stale: Los datos no son frescos
        updated_at: Momento de la última consulta exitosa
    """
    data: Any = None
    is_loading: bool = False
    error: Optional[str] = None
    is_stale: bool = False
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'data': self.data,
            'isLoading': self.is_loading,
            'error': self.error,
            'isStale': self.is_stale,
            'updatedAt': self.updated_at,
        }


@dataclass
class _Entry:
    data: Any
    fetched_at: float
    updated_at: str
    invalidated: bool = False
    error: Optional[str] = None


def _matches_prefix(key: Tuple[Any, ...], prefix: Tuple[Any, ...]) -> bool:
    return len(key) >= len(prefix) and key[:len(prefix)] == tuple(prefix)


class QueryCache:
    """
    Caché en memoria de resultados de consultas.

    Uso:
        cache = QueryCache()
        result = cache.fetch(('orders', user_id), lambda: repo.find_all_where(user_id=user_id))
        cache.invalidate(('orders',))
    """

    def __init__(self, stale_times: Dict[str, int] = None, clock: Callable[[], float] = time.monotonic):
        self._stale_times = dict(STALE_TIMES if stale_times is None else stale_times)
        self._clock = clock
        self._entries: Dict[Tuple[Any, ...], _Entry] = {}
        self._lock = threading.Lock()
        self._key_locks: Dict[Tuple[Any, ...], threading.Lock] = {}
        # Contador por clave; invalidate() lo incrementa aunque la consulta siga en vuelo
        self._generations: Dict[Tuple[Any, ...], int] = {}

    def _get_key_lock(self, key: Tuple[Any, ...]) -> threading.Lock:
        with self._lock:
            if key not in self._key_locks:
                self._key_locks[key] = threading.Lock()
            return self._key_locks[key]

    def _is_stale(self, key: Tuple[Any, ...], entry: _Entry) -> bool:
        if entry.invalidated:
            return True
        window = self._stale_times.get(key[0], DEFAULT_STALE_TIME)
        return (self._clock() - entry.fetched_at) >= window

    def fetch(self, key: Iterable[Any], fetcher: Callable[[], Any]) -> QueryResult:
        """
        Devuelve datos frescos de la caché o ejecuta la consulta.

        Si la clave se invalida mientras la consulta está en vuelo, el
        resultado se guarda ya marcado como viejo y la siguiente lectura
        vuelve a consultar.

        Args:
            key: Clave de la consulta (tupla)
            fetcher: Función sin argumentos que consulta el backend

        Returns:
            QueryResult (nunca lanza excepciones del fetcher)
        """
        key = tuple(key)
        with self._get_key_lock(key):
            entry = self._entries.get(key)
            if entry is not None and not self._is_stale(key, entry):
                return QueryResult(data=entry.data, error=entry.error, updated_at=entry.updated_at)

            with self._lock:
                generation = self._generations.get(key, 0)

            try:
                data = fetcher()
            except Exception as e:
                print(f"[ERROR CONSULTA] {key}: {e}")
                if entry is not None:
                    entry.error = str(e)
                    return QueryResult(
                        data=entry.data,
                        error=entry.error,
                        is_stale=True,
                        updated_at=entry.updated_at
                    )
                return QueryResult(error=str(e))

            entry = _Entry(data=data, fetched_at=self._clock(), updated_at=now_iso())
            with self._lock:
                entry.invalidated = self._generations.get(key, 0) != generation
                self._entries[key] = entry
            return QueryResult(data=data, is_stale=entry.invalidated, updated_at=entry.updated_at)

    def peek(self, key: Iterable[Any]) -> QueryResult:
        """Estado actual de una clave sin consultar el backend."""
        key = tuple(key)
        with self._lock:
            entry = self._entries.get(key)
            key_lock = self._key_locks.get(key)
        if entry is None:
            return QueryResult(is_loading=bool(key_lock and key_lock.locked()))
        return QueryResult(
            data=entry.data,
            error=entry.error,
            is_stale=self._is_stale(key, entry),
            updated_at=entry.updated_at
        )

    def invalidate(self, prefix: Iterable[Any]) -> int:
        """
        Marca como viejas todas las entradas cuya clave empieza por el prefijo.

        También alcanza a las claves con una consulta en vuelo.

        Returns:
            Cantidad de entradas marcadas
        """
        prefix = tuple(prefix)
        count = 0
        with self._lock:
            for key in set(self._entries) | set(self._key_locks):
                if not _matches_prefix(key, prefix):
                    continue
                self._generations[key] = self._generations.get(key, 0) + 1
                entry = self._entries.get(key)
                if entry is not None:
                    entry.invalidated = True
                    count += 1
        return count

    def invalidate_for(self, kind: str, params: Dict[str, Any]) -> List[Tuple[Any, ...]]:
        """
        Aplica el conjunto de invalidación de una mutación exitosa.

        Returns:
            Prefijos invalidados
        """
        prefixes = resolve_invalidations(kind, params)
        for prefix in prefixes:
            self.invalidate(prefix)
        return prefixes

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._key_locks.clear()
            self._generations.clear()


# ═══════════════════════════════════════════════════════════════════════════════
# MUTACIONES PENDIENTES
# ═══════════════════════════════════════════════════════════════════════════════

class MutationTracker:
    """
    Bandera de "pendiente" por (tipo de mutación, alcance).
    Un reenvío mientras la anterior sigue en curso se rechaza.
    """

    def __init__(self):
        self._pending = set()
        self._lock = threading.Lock()

    def begin(self, kind: str, scope: Any = None) -> bool:
        """Marca la mutación como pendiente. False si ya lo estaba."""
        with self._lock:
            if (kind, scope) in self._pending:
                return False
            self._pending.add((kind, scope))
            return True

    def end(self, kind: str, scope: Any = None) -> None:
        with self._lock:
            self._pending.discard((kind, scope))

    def is_pending(self, kind: str, scope: Any = None) -> bool:
        with self._lock:
            return (kind, scope) in self._pending
