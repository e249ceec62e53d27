# ==============================================================================
# REPOSITORIO BASE - Almacén clave/valor sobre archivos JSON
# ==============================================================================
# Cada clave del almacén local (pos-categories, pos-items, pos-sales,
# pos-settings) vive en su propio archivo <clave>.json dentro del directorio
# de datos. Toda escritura reemplaza el archivo completo.
# ==============================================================================

import json
import os
import time
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from pos_system.performance_logger import log_warning, profile_function


def generate_id(existing_ids: Iterable[str], now_ms: Optional[int] = None) -> str:
    """
    Genera un id a partir del timestamp de creación en milisegundos.
    Si ya existe en la colección, avanza 1 ms hasta encontrar uno libre.

    Args:
        existing_ids: Ids ya usados en la colección
        now_ms: Timestamp a usar (por defecto, ahora)

    Returns:
        Id único como string
    """
    taken = set(str(i) for i in existing_ids)
    candidate = now_ms if now_ms is not None else int(time.time() * 1000)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)


class BaseRepository(ABC):
    """
    Clase base abstracta para todos los repositorios.
    Proporciona lectura/escritura de una clave del almacén como archivo JSON
    con manejo de concurrencia básico mediante locks.

    El lock serializa los ciclos leer-modificar-escribir dentro del proceso.
    Entre procesos (varias ventanas/pestañas) sigue ganando la última escritura.
    """

    # Lock global para evitar escrituras concurrentes a archivos
    _file_lock = threading.RLock()

    def __init__(self, base_path: str, key: str):
        """
        Inicializa el repositorio.

        Args:
            base_path: Directorio de datos
            key: Clave del almacén (ej: 'pos-items')
        """
        self.key = key
        self.file_path = os.path.join(base_path, f'{key}.json')
        os.makedirs(base_path, exist_ok=True)

    @property
    def lock(self) -> threading.RLock:
        """Lock para agrupar un ciclo leer-modificar-escribir completo."""
        return self._file_lock

    @abstractmethod
    def _empty_data(self) -> Any:
        """
        Retorna la estructura de datos vacía para este repositorio.
        Debe ser implementado por cada repositorio concreto.
        """
        pass

    def exists(self) -> bool:
        """Indica si la clave tiene datos guardados."""
        return os.path.exists(self.file_path)

    def _read_raw(self) -> Any:
        """
        Lee los datos crudos del archivo JSON.

        Returns:
            Datos parseados, o la estructura vacía si no existe o está corrupto
        """
        with self._file_lock:
            if not os.path.exists(self.file_path):
                return self._empty_data()
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError):
                log_warning(f"{os.path.basename(self.file_path)} corrupto, se lee vacío")
                return self._empty_data()
            if not isinstance(data, type(self._empty_data())):
                log_warning(f"{os.path.basename(self.file_path)} con formato inesperado, se lee vacío")
                return self._empty_data()
            return data

    @profile_function(name="Escritura de almacén JSON")
    def _write_raw(self, data: Any) -> None:
        """
        Escribe datos al archivo JSON.

        Args:
            data: Datos a serializar y escribir

        Raises:
            OSError: Si hay error de escritura
        """
        with self._file_lock:
            # Escribir a archivo temporal primero para atomicidad
            temp_path = self.file_path + '.tmp'
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, self.file_path)
            except Exception:
                # Limpiar archivo temporal si algo falla
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise

    def clear(self) -> None:
        """Elimina la clave del almacén por completo."""
        with self._file_lock:
            if os.path.exists(self.file_path):
                os.remove(self.file_path)


class DictRepository(BaseRepository):
    """
    Repositorio para una clave que guarda un único objeto JSON.

    Ejemplo: pos-settings.json -> {"businessName": "...", ...}
    """

    def _empty_data(self) -> Dict:
        return {}

    def get_all(self) -> Dict[str, Any]:
        return self._read_raw()

    def save_all(self, data: Dict[str, Any]) -> None:
        """Guarda el objeto completo (reemplazo total)."""
        self._write_raw(data)


class ListRepository(BaseRepository):
    """
    Repositorio para una clave que guarda una lista de registros.

    Ejemplo: pos-sales.json -> [{...}, {...}]
    """

    def _empty_data(self) -> List:
        return []

    def get_all(self) -> List[Dict[str, Any]]:
        return self._read_raw()

    def save_all(self, data: List[Dict[str, Any]]) -> None:
        """
        Guarda todos los registros (reemplazo completo).

        Args:
            data: Lista completa de datos
        """
        self._write_raw(data)

    def append(self, record: Dict[str, Any]) -> None:
        """
        Agrega un registro al final.

        Args:
            record: Datos del nuevo registro
        """
        with self._file_lock:
            data = self.get_all()
            data.append(record)
            self._write_raw(data)

    def find_by(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        """
        Busca un registro por un campo específico.

        Returns:
            Primer registro que coincide o None
        """
        for record in self.get_all():
            if record.get(field) == value:
                return record
        return None

    def replace_where(self, field: str, value: Any, record: Dict[str, Any]) -> bool:
        """
        Reemplaza en su posición el registro cuyo campo coincide.

        Returns:
            True si se reemplazó
        """
        with self._file_lock:
            data = self.get_all()
            for pos, current in enumerate(data):
                if current.get(field) == value:
                    data[pos] = record
                    self._write_raw(data)
                    return True
            return False

    def remove_where(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        """
        Elimina el registro cuyo campo coincide.

        Returns:
            Registro eliminado o None si no existía
        """
        with self._file_lock:
            data = self.get_all()
            kept = [r for r in data if r.get(field) != value]
            if len(kept) == len(data):
                return None
            removed = next(r for r in data if r.get(field) == value)
            self._write_raw(kept)
            return removed
