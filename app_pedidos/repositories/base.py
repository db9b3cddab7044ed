# ==============================================================================
# REPOSITORIO BASE - Colecciones de documentos sobre archivos JSON
# ==============================================================================
# Cada colección (products, categories, orders, settings) vive en su propio
# archivo JSON con formato {doc_id: {campos}}. Las escrituras de un archivo
# son atómicas (archivo temporal + os.replace); no hay transacciones entre
# colecciones.
#
# Los listeners en tiempo real se modelan como suscripciones en proceso:
# cada escritura entrega a los suscriptores la lista completa de documentos.
# ==============================================================================

import json
import os
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple


class _ServerTimestamp:
    """Marcador que el repositorio reemplaza por la hora del almacén al escribir."""

    def __repr__(self) -> str:
        return 'SERVER_TIMESTAMP'


SERVER_TIMESTAMP = _ServerTimestamp()

# (doc_id, datos) tal como los entrega un snapshot
Document = Tuple[str, Dict[str, Any]]
SnapshotListener = Callable[[List[Document]], None]


class BaseRepository(ABC):
    """
    Clase base abstracta para todos los repositorios.
    Proporciona lectura/escritura de archivos JSON con un lock compartido.
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
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._ensure_file_exists()

    def _ensure_file_exists(self) -> None:
        """Crea el archivo con datos vacíos si no existe."""
        if not os.path.exists(self.file_path):
            self._write_raw(self._empty_data())

    @abstractmethod
    def _empty_data(self) -> Any:
        """Estructura vacía (dict, list) según el repositorio."""
        pass

    def _read_raw(self) -> Any:
        """
        Lee los datos crudos del archivo JSON.

        Returns:
            Datos parseados; la estructura vacía si el archivo está corrupto
        """
        with self._file_lock:
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except (json.JSONDecodeError, FileNotFoundError):
                return self._empty_data()

    def _write_raw(self, data: Any) -> None:
        """
        Escribe datos al archivo JSON de forma atómica.

        Raises:
            OSError: Si hay error de escritura
        """
        with self._file_lock:
            temp_path = self.file_path + '.tmp'
            try:
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, self.file_path)
            except Exception:
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                raise

    def reload(self) -> None:
        """Sin caché: cada lectura va al archivo."""
        pass


class CollectionRepository(BaseRepository):
    """
    Colección de documentos {doc_id: datos} con suscripciones de snapshot.

    Los valores SERVER_TIMESTAMP de un documento se resuelven con la hora
    actual (UTC, ISO) en el momento de la escritura.
    """

    def __init__(self, file_path: str):
        super().__init__(file_path)
        self._listeners: List[SnapshotListener] = []
        self._listeners_lock = threading.Lock()

    def _empty_data(self) -> Dict:
        return {}

    # -------------------------------------------------------------------------
    # Lecturas
    # -------------------------------------------------------------------------

    def get_all(self) -> Dict[str, Dict[str, Any]]:
        """Todos los documentos como {doc_id: datos}."""
        data = self._read_raw()
        return data if isinstance(data, dict) else {}

    def list_documents(self) -> List[Document]:
        """Todos los documentos como lista de (doc_id, datos)."""
        return list(self.get_all().items())

    def get_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """
        Obtiene un documento por su ID.

        Returns:
            Datos del documento o None si no existe
        """
        return self.get_all().get(str(doc_id))

    def exists(self, doc_id: str) -> bool:
        return self.get_by_id(doc_id) is not None

    # -------------------------------------------------------------------------
    # Escrituras
    # -------------------------------------------------------------------------

    @staticmethod
    def new_id() -> str:
        """ID aleatorio de 20 caracteres."""
        return uuid.uuid4().hex[:20]

    @staticmethod
    def _resolve(fields: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        return {
            key: (now if value is SERVER_TIMESTAMP else value)
            for key, value in fields.items()
        }

    def add(self, fields: Dict[str, Any]) -> str:
        """
        Inserta un documento con ID generado.

        Args:
            fields: Campos del documento (admite SERVER_TIMESTAMP)

        Returns:
            ID del documento creado
        """
        with self._file_lock:
            data = self.get_all()
            doc_id = self.new_id()
            while doc_id in data:
                doc_id = self.new_id()
            data[doc_id] = self._resolve(fields)
            self._write_raw(data)
        self._notify()
        return doc_id

    def set(self, doc_id: str, fields: Dict[str, Any], merge: bool = False) -> None:
        """
        Escribe un documento completo (o lo combina con el existente).

        Args:
            doc_id: ID del documento
            fields: Campos a escribir
            merge: True para combinar con los campos existentes
        """
        with self._file_lock:
            data = self.get_all()
            resolved = self._resolve(fields)
            if merge and isinstance(data.get(doc_id), dict):
                data[doc_id].update(resolved)
            else:
                data[doc_id] = resolved
            self._write_raw(data)
        self._notify()

    def update(self, doc_id: str, fields: Dict[str, Any]) -> bool:
        """
        Actualiza campos de un documento existente.

        Returns:
            False si el documento no existe
        """
        with self._file_lock:
            data = self.get_all()
            if doc_id not in data:
                return False
            data[doc_id].update(self._resolve(fields))
            self._write_raw(data)
        self._notify()
        return True

    def delete(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """
        Elimina un documento.

        Returns:
            Datos eliminados o None si no existía
        """
        with self._file_lock:
            data = self.get_all()
            removed = data.pop(doc_id, None)
            if removed is None:
                return None
            self._write_raw(data)
        self._notify()
        return removed

    def replace_all(self, documents: Dict[str, Dict[str, Any]]) -> None:
        """
        Reemplaza la colección completa en una sola escritura (lote).

        Args:
            documents: Nuevo contenido {doc_id: datos}
        """
        with self._file_lock:
            self._write_raw({
                doc_id: self._resolve(fields)
                for doc_id, fields in documents.items()
            })
        self._notify()

    # -------------------------------------------------------------------------
    # Suscripciones (listeners en tiempo real)
    # -------------------------------------------------------------------------

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """
        Registra un listener y le entrega el snapshot inicial.

        Args:
            listener: Función que recibe la lista de (doc_id, datos)

        Returns:
            Función para cancelar la suscripción
        """
        with self._listeners_lock:
            self._listeners.append(listener)
        listener(self.list_documents())

        def unsubscribe() -> None:
            with self._listeners_lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        if not listeners:
            return
        snapshot = self.list_documents()
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as e:
                print(f"[ADVERTENCIA] Listener de {os.path.basename(self.file_path)} falló: {e}")


class ListRepository(BaseRepository):
    """
    Repositorio base para datos almacenados como lista.

    Ejemplo: audit.json -> [{...}, {...}]
    """

    def _empty_data(self) -> List:
        return []

    def get_all(self) -> List[Dict[str, Any]]:
        data = self._read_raw()
        return data if isinstance(data, list) else []

    def save_all(self, data: List[Dict[str, Any]]) -> None:
        self._write_raw(data)
