# ==============================================================================
# SERVICIO BASE - Lecturas cacheadas y mutaciones con invalidación
# ==============================================================================
# Todos los servicios de dominio heredan de aquí.
#
# LECTURAS:  self._query(clave, fetcher) -> QueryResult
# ESCRITURAS: self._mutate(tipo, acción, ...) -> dict de resultado
#
#   {'ok': True,  'data': ..., 'toast': {...}, 'error': None}
#   {'ok': False, 'data': None, 'toast': {...}, 'error': 'validation'}
#
# Orden en una mutación exitosa:
#   1. acción contra el repositorio
#   2. toast de éxito
#   3. invalidaciones declaradas en INVALIDATION_GRAPH
# ==============================================================================

from typing import Any, Callable, Dict, Iterable, Optional, Union

from storefront.models import Toast
from storefront.query_cache import QueryCache, QueryResult, MutationTracker


# Códigos de error de los resultados
ERROR_VALIDATION = 'validation'
ERROR_AUTH_REQUIRED = 'auth_required'
ERROR_FORBIDDEN = 'forbidden'
ERROR_NOT_FOUND = 'not_found'
ERROR_PENDING = 'pending'
ERROR_REMOTE = 'remote'
ERROR_NOT_CONFIGURED = 'not_configured'

# Código HTTP por tipo de error (lo usan las rutas)
ERROR_STATUS = {
    ERROR_VALIDATION: 400,
    ERROR_AUTH_REQUIRED: 401,
    ERROR_FORBIDDEN: 403,
    ERROR_NOT_FOUND: 404,
    ERROR_PENDING: 409,
    ERROR_REMOTE: 500,
    ERROR_NOT_CONFIGURED: 503,
}

# Toasts compartidos
LOGIN_REQUIRED_TITLE = '로그인이 필요합니다'
NOT_CONFIGURED_TOAST = Toast.error('서비스 준비 중', '현재 서비스를 이용할 수 없습니다. 잠시 후 다시 시도해 주세요.')
PENDING_TOAST = Toast.error('처리 중입니다', '이전 요청을 처리하고 있습니다.')


class ServiceError(Exception):
    """
    Error de negocio lanzado dentro de una acción de mutación.
    No se registra como error remoto: se convierte directamente en resultado.
    """

    def __init__(self, code: str, toast: Toast):
        super().__init__(toast.title)
        self.code = code
        self.toast = toast


def ok(data: Any = None, toast: Optional[Toast] = None) -> Dict[str, Any]:
    return {
        'ok': True,
        'data': data,
        'toast': toast.to_dict() if toast else None,
        'error': None
    }


def fail(code: str, toast: Toast) -> Dict[str, Any]:
    return {
        'ok': False,
        'data': None,
        'toast': toast.to_dict(),
        'error': code
    }


def login_required_result(description: str = '로그인 후 이용해 주세요.') -> Dict[str, Any]:
    return fail(ERROR_AUTH_REQUIRED, Toast.error(LOGIN_REQUIRED_TITLE, description))


class BaseService:
    """
    Funcionalidad común de los servicios de dominio.

    Args:
        cache: Caché de consultas compartida
        tracker: Registro de mutaciones pendientes
        backend_configured: False si el backend no está disponible
    """

    def __init__(
        self,
        cache: QueryCache = None,
        tracker: MutationTracker = None,
        backend_configured: bool = True
    ):
        self.cache = cache or QueryCache()
        self.tracker = tracker or MutationTracker()
        self.backend_configured = backend_configured

    def _query(self, key: Iterable[Any], fetcher: Callable[[], Any]) -> QueryResult:
        return self.cache.fetch(tuple(key), fetcher)

    def is_pending(self, kind: str, scope: Any = None) -> bool:
        return self.tracker.is_pending(kind, scope)

    def _mutate(
        self,
        kind: str,
        action: Callable[[], Any],
        *,
        params: Union[Dict[str, Any], Callable[[Any], Dict[str, Any]]],
        success_toast: Union[Toast, Callable[[Any], Toast], None],
        error_toast: Toast,
        log_tag: str,
        scope: Any = None
    ) -> Dict[str, Any]:
        """
        Ejecuta una mutación con bandera de pendiente e invalidación.

        Args:
            kind: Tipo de mutación (clave de INVALIDATION_GRAPH)
            action: Función que escribe en el repositorio y retorna los datos
            params: Parámetros para rellenar las claves a invalidar
                    (dict o función de los datos retornados)
            success_toast: Toast de éxito (o función de los datos)
            error_toast: Toast genérico para errores remotos
            log_tag: Etiqueta para la consola, ej. 'ERROR PEDIDO'
            scope: Alcance de la bandera de pendiente

        Returns:
            Dict de resultado (ver cabecera del módulo)
        """
        if not self.tracker.begin(kind, scope):
            return fail(ERROR_PENDING, PENDING_TOAST)
        try:
            try:
                data = action()
            except ServiceError as e:
                return fail(e.code, e.toast)
            except Exception as e:
                # Error remoto: el estado previo y la caché quedan intactos
                print(f"[{log_tag}] {kind}: {e}")
                return fail(ERROR_REMOTE, error_toast)

            toast = success_toast(data) if callable(success_toast) else success_toast
            resolved = params(data) if callable(params) else params
            self.cache.invalidate_for(kind, resolved or {})
            return ok(data, toast)
        finally:
            self.tracker.end(kind, scope)
