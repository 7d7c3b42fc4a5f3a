# ==============================================================================
# REPOSITORIO DE USUARIOS
# ==============================================================================
# Encapsula todo el acceso a users.json
# Los usuarios se almacenan como lista de registros con 'id' numérico.
# ==============================================================================

import os
from typing import Any, Dict, Optional

from storefront.models import now_iso
from storefront.repositories.base import ListRepository


class UserRepository(ListRepository):
    """
    Repositorio para gestión de usuarios.

    Formato de datos en users.json:
    [
        {"id": 1, "username": "admin", "password": "hashed_pwd", "is_admin": true, ...},
        {"id": 2, "username": "minji", "password": "hashed_pwd", "is_admin": false, ...}
    ]
    """

    def __init__(self, base_path: str):
        """
        Inicializa el repositorio de usuarios.

        Args:
            base_path: Directorio de datos
        """
        file_path = os.path.join(base_path, 'users.json')
        super().__init__(file_path)

    def get_user(self, user_id: int) -> Optional[Dict[str, Any]]:
        """
        Obtiene un usuario por su ID.

        Returns:
            Datos del usuario o None
        """
        return self.get_by_id(user_id)

    def get_user_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        return self.find_where(username=username)

    def user_exists(self, username: str) -> bool:
        return self.get_user_by_username(username) is not None

    def create_user(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Crea un nuevo usuario.

        Args:
            data: Campos del usuario (password ya hasheado)

        Returns:
            Registro creado con su ID
        """
        record = dict(data)
        record.setdefault('created_at', now_iso())
        return self.insert(record)

    def update_user(self, user_id: int, updates: Dict[str, Any]) -> bool:
        """
        Actualiza datos de un usuario.

        Returns:
            True si se actualizó
        """
        return self.update_by_id(user_id, updates) is not None

    # NOTA: La validación de credenciales se hace SOLO en AuthService
    # usando check_password_hash.
    # El repositorio solo maneja persistencia, no lógica de autenticación.
