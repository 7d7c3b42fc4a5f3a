# ==============================================================================
# REPOSITORIO BASE - Funcionalidad común para acceso a tablas JSON
# ==============================================================================

import json
import os
from typing import Any, Callable, Dict, List, Optional
from abc import ABC, abstractmethod
import threading


class BaseRepository(ABC):
    """
    Clase base abstracta para todos los repositorios.
    Proporciona funcionalidad común para lectura/escritura de archivos JSON
    con manejo de concurrencia básico mediante locks.

    Al migrar al backend administrado:
    - Esta clase se reemplazará por el cliente del backend
    - Los métodos de lectura/escritura se convertirán en consultas a tablas
    - Los locks se reemplazarán por transacciones del backend
    """

    # Lock global para evitar escrituras concurrentes a archivos
    _file_lock = threading.RLock()

    def __init__(self, file_path: str):
        """
        Inicializa el repositorio con la ruta al archivo JSON.

        Args:
            file_path: Ruta absoluta al archivo JSON de datos
        """
        self.file_path = file_path
        self._ensure_file_exists()

    def _ensure_file_exists(self) -> None:
        """Crea el archivo con datos vacíos si no existe."""
        directory = os.path.dirname(self.file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        if not os.path.exists(self.file_path):
            self._write_raw(self._empty_data())

    @abstractmethod
    def _empty_data(self) -> Any:
        """
        Retorna la estructura de datos vacía para este repositorio.
        Debe ser implementado por cada repositorio concreto.
        """
        pass

    def _read_raw(self) -> Any:
        """
        Lee los datos crudos del archivo JSON.

        Returns:
            Datos parseados del JSON (vacíos si el archivo está corrupto)
        """
        with self._file_lock:
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except (json.JSONDecodeError, FileNotFoundError):
                return self._empty_data()

    def _write_raw(self, data: Any) -> None:
        """
        Escribe datos al archivo JSON.

        Raises:
            IOError: Si hay error de escritura
        """
        with self._file_lock:
            # Escribir a archivo temporal primero para atomicidad
            temp_path = self.file_path + '.tmp'
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, self.file_path)
            except Exception:
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise


class DictRepository(BaseRepository):
    """
    Repositorio base para datos almacenados como diccionario.
    El ID es la clave del diccionario.

    Ejemplo: products.json -> {"1": {...}, "2": {...}}
    """

    def _empty_data(self) -> Dict:
        return {}

    def get_all(self) -> Dict[str, Any]:
        """Obtiene todos los registros."""
        data = self._read_raw()
        return data if isinstance(data, dict) else {}

    def get_by_id(self, record_id: Any) -> Optional[Dict[str, Any]]:
        """
        Obtiene un registro por su ID.

        Args:
            record_id: ID del registro (int o str)

        Returns:
            Datos del registro o None si no existe
        """
        return self.get_all().get(str(record_id))

    def update(self, record_id: Any, record_data: Dict[str, Any]) -> None:
        """Reemplaza un registro completo."""
        with self._file_lock:
            data = self.get_all()
            data[str(record_id)] = record_data
            self._write_raw(data)

    def next_id(self) -> int:
        """Siguiente ID numérico libre."""
        keys = [int(k) for k in self.get_all().keys() if str(k).isdigit()]
        return max(keys, default=0) + 1


class ListRepository(BaseRepository):
    """
    Repositorio base para datos almacenados como lista (una "tabla").
    Cada registro lleva un campo 'id' numérico asignado al insertar.

    Ejemplo: orders.json -> [{...}, {...}]
    """

    def _empty_data(self) -> List:
        return []

    def get_all(self) -> List[Dict[str, Any]]:
        """Obtiene todos los registros."""
        data = self._read_raw()
        return data if isinstance(data, list) else []

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Inserta un registro asignando el siguiente ID.

        Args:
            record: Datos del nuevo registro

        Returns:
            El registro insertado (con 'id')
        """
        with self._file_lock:
            data = self.get_all()
            record = dict(record)
            if not record.get('id'):
                record['id'] = max((r.get('id', 0) or 0 for r in data), default=0) + 1
            data.append(record)
            self._write_raw(data)
            return record

    def get_by_id(self, record_id: int) -> Optional[Dict[str, Any]]:
        return self.find_where(id=record_id)

    def find_where(self, **criteria: Any) -> Optional[Dict[str, Any]]:
        """
        Primer registro que cumple TODOS los criterios (igualdad).

        Ejemplo:
            repo.find_where(user_id=1, product_id=7)
        """
        for record in self.get_all():
            if all(record.get(k) == v for k, v in criteria.items()):
                return record
        return None

    def find_all_where(self, **criteria: Any) -> List[Dict[str, Any]]:
        """Todos los registros que cumplen los criterios."""
        return [
            r for r in self.get_all()
            if all(r.get(k) == v for k, v in criteria.items())
        ]

    def update_by_id(self, record_id: int, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Actualiza campos de un registro.

        Returns:
            Registro actualizado o None si no existe
        """
        with self._file_lock:
            data = self.get_all()
            for record in data:
                if record.get('id') == record_id:
                    record.update(updates)
                    self._write_raw(data)
                    return record
            return None

    def update_where(self, updates: Dict[str, Any], predicate: Callable[[Dict[str, Any]], bool]) -> List[Dict[str, Any]]:
        """
        Actualiza todos los registros que cumplen el predicado.

        Returns:
            Lista de registros modificados
        """
        with self._file_lock:
            data = self.get_all()
            changed = []
            for record in data:
                if predicate(record):
                    record.update(updates)
                    changed.append(record)
            if changed:
                self._write_raw(data)
            return changed

    def delete_where(self, **criteria: Any) -> int:
        """
        Elimina los registros que cumplen los criterios.

        Returns:
            Cantidad de registros eliminados
        """
        with self._file_lock:
            data = self.get_all()
            kept = [
                r for r in data
                if not all(r.get(k) == v for k, v in criteria.items())
            ]
            removed = len(data) - len(kept)
            if removed:
                self._write_raw(kept)
            return removed
