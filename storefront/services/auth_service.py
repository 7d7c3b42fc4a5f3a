# ==============================================================================
# SERVICIO DE AUTENTICACIÓN Y CONTEXTO DE SESIÓN
# ==============================================================================
# AuthService: registro, credenciales y acceso de administrador.
# SessionContext: estado de autenticación de UNA petición.
#
# La sesión de Flask guarda:
#   session['user_id']    → sesión remota (se verifica contra el backend)
#   session['user']       → copia serializada del usuario (sin password)
#   session['admin_auth'] → acceso al panel de administración
#
# La copia local es solo informativa: si la sesión remota ya no resuelve
# un usuario, la copia se elimina.
# ==============================================================================

from dataclasses import dataclass
from typing import Any, Dict, MutableMapping, Optional

from werkzeug.security import generate_password_hash, check_password_hash

from storefront.models import Toast, User
from storefront.query_cache import QueryResult
from storefront.repositories.interfaces import IUserRepository
from storefront.services.base import (
    BaseService,
    fail,
    ok,
    ERROR_REMOTE,
    ERROR_VALIDATION,
)


SESSION_USER_ID = 'user_id'
SESSION_USER = 'user'
SESSION_ADMIN = 'admin_auth'
SESSION_REDIRECT = 'redirect_path'


class AuthService(BaseService):
    """
    Servicio de autenticación.

    Responsabilidades:
    - Registro de usuarios (password siempre hasheado)
    - Validación de credenciales
    - Acceso de administrador
    """

    MIN_PASSWORD_LENGTH = 6

    def __init__(self, user_repo: IUserRepository, **kwargs):
        super().__init__(**kwargs)
        self.user_repo = user_repo

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def fetch_session_user(self, user_id: int) -> QueryResult:
        """Usuario de la sesión remota (cacheado por poco tiempo)."""
        return self._query(('session', user_id), lambda: self.user_repo.get_user(user_id))

    def forget_session(self, user_id: int) -> None:
        self.cache.invalidate(('session', user_id))

    # =========================================================================
    # AUTENTICACIÓN
    # =========================================================================

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """
        Autentica un usuario.

        Args:
            username: Nombre de usuario
            password: Contraseña en texto plano

        Returns:
            User si las credenciales son válidas, None si no
        """
        if not username or not password:
            return None
        data = self.user_repo.get_user_by_username(username.strip())
        if not data:
            return None
        if not check_password_hash(data.get('password', ''), password):
            return None
        return User.from_dict(data)

    def register(
        self,
        username: str,
        password: str,
        email: str = '',
        first_name: str = '',
        last_name: str = '',
        is_admin: bool = False
    ) -> Dict[str, Any]:
        """
        Crea un nuevo usuario.

        Returns:
            Dict de resultado con el usuario serializado en 'data'
        """
        username = (username or '').strip()
        if not username:
            return fail(ERROR_VALIDATION, Toast.error('회원가입 실패', '아이디를 입력해주세요.'))
        if not password or len(password) < self.MIN_PASSWORD_LENGTH:
            return fail(ERROR_VALIDATION, Toast.error(
                '회원가입 실패', f'비밀번호는 {self.MIN_PASSWORD_LENGTH}자 이상이어야 합니다.'
            ))

        try:
            if self.user_repo.user_exists(username):
                return fail(ERROR_VALIDATION, Toast.error('회원가입 실패', '이미 사용 중인 아이디입니다.'))
            record = self.user_repo.create_user({
                'username': username,
                'password': generate_password_hash(password),
                'email': (email or '').strip(),
                'first_name': (first_name or '').strip(),
                'last_name': (last_name or '').strip(),
                'is_admin': bool(is_admin),
                'points': 0,
                'coupons': 0,
                'total_orders': 0,
                'total_spent': 0.0,
            })
        except OSError as e:
            print(f"[ERROR REGISTRO] {type(e).__name__}: {e}")
            return fail(ERROR_REMOTE, Toast.error('회원가입 실패', '잠시 후 다시 시도해 주세요.'))

        user = User.from_dict(record)
        return ok(user.to_session_dict(), Toast('회원가입 완료', f'{user.display_name}님 환영합니다.'))

    def admin_login(self, username: str, password: str) -> Optional[User]:
        """Solo usuarios con is_admin pasan el acceso de administrador."""
        user = self.authenticate(username, password)
        if user is None or not user.is_admin:
            return None
        return user

    def admin_status(self, session: MutableMapping, user: Optional[User] = None) -> bool:
        """Acceso de administrador: bandera de sesión o usuario admin."""
        return bool(session.get(SESSION_ADMIN)) or (user is not None and user.is_admin)


# ==============================================================================
# CONTEXTO DE SESIÓN (por petición)
# ==============================================================================

@dataclass
class SessionContext:
    """
    Estado de autenticación de la petición actual.

    Attributes:
        user: Usuario autenticado o None
        is_loading: True mientras se restaura la sesión
        redirect_path: Ruta a la que volver después del login
    """
    user: Optional[User] = None
    is_loading: bool = True
    redirect_path: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @classmethod
    def restore(cls, auth_service: AuthService, session: MutableMapping) -> 'SessionContext':
        """
        Construye el contexto desde la sesión de Flask.

        Consulta la sesión remota; si no resuelve un usuario,
        elimina la copia local.
        """
        ctx = cls(redirect_path=session.get(SESSION_REDIRECT))
        user_id = session.get(SESSION_USER_ID)

        if user_id is None:
            session.pop(SESSION_USER, None)
            ctx.is_loading = False
            return ctx

        result = auth_service.fetch_session_user(user_id)
        if result.data and not result.error:
            ctx.user = User.from_dict(result.data)
            session[SESSION_USER] = ctx.user.to_session_dict()
        else:
            if result.error:
                print(f"[ADVERTENCIA] No se pudo restaurar la sesión {user_id}: {result.error}")
            session.pop(SESSION_USER_ID, None)
            session.pop(SESSION_USER, None)
            session.pop(SESSION_ADMIN, None)

        ctx.is_loading = False
        return ctx

    def login(self, auth_service: AuthService, session: MutableMapping,
              username: str, password: str) -> bool:
        """
        Inicia sesión.

        Returns:
            True si las credenciales son válidas. Si no, el estado no cambia.
        """
        user = auth_service.authenticate(username, password)
        if user is None:
            return False
        self.user = user
        session[SESSION_USER_ID] = user.id
        session[SESSION_USER] = user.to_session_dict()
        return True

    def logout(self, auth_service: AuthService, session: MutableMapping) -> None:
        """Elimina usuario, copia local y ruta de retorno."""
        if self.user is not None:
            auth_service.forget_session(self.user.id)
        self.user = None
        self.redirect_path = None
        for key in (SESSION_USER_ID, SESSION_USER, SESSION_ADMIN, SESSION_REDIRECT):
            session.pop(key, None)

    def set_redirect_path(self, session: MutableMapping, path: Optional[str]) -> None:
        self.redirect_path = path
        if path:
            session[SESSION_REDIRECT] = path
        else:
            session.pop(SESSION_REDIRECT, None)
