# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
#
# Los servicios dependen de estos protocolos y no de los archivos JSON.
# Cambiar el almacén de documentos (JSON local → servicio gestionado) solo
# requiere una nueva implementación y cambiar la instanciación en
# app_container.py.
#
# ==============================================================================

from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, runtime_checkable


@runtime_checkable
class IRepository(Protocol):
    """Operaciones mínimas de cualquier repositorio."""

    def reload(self) -> None:
        ...


@runtime_checkable
class ICollectionRepository(IRepository, Protocol):
    """
    Colección de documentos con ID.
    Usado por: productos, categorías, pedidos, configuración.
    """

    def get_all(self) -> Dict[str, Dict[str, Any]]:
        ...

    def list_documents(self) -> List[Tuple[str, Dict[str, Any]]]:
        ...

    def get_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    def add(self, fields: Dict[str, Any]) -> str:
        ...

    def set(self, doc_id: str, fields: Dict[str, Any], merge: bool = False) -> None:
        ...

    def update(self, doc_id: str, fields: Dict[str, Any]) -> bool:
        ...

    def delete(self, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    def replace_all(self, documents: Dict[str, Dict[str, Any]]) -> None:
        ...

    def subscribe(self, listener: Callable[[List[Tuple[str, Dict[str, Any]]]], None]) -> Callable[[], None]:
        ...


@runtime_checkable
class IOrderRepository(ICollectionRepository, Protocol):
    """Pedidos: inserción con fecha del almacén y cambios de estado."""

    def create_order(self, fields: Dict[str, Any]) -> str:
        ...

    def update_status(self, order_id: str, update: Dict[str, Any]) -> bool:
        ...


@runtime_checkable
class ISettingsRepository(Protocol):
    """Documento único de la tienda."""

    def get_shop(self) -> Dict[str, Any]:
        ...

    def save_shop(self, fields: Dict[str, Any]) -> None:
        ...


@runtime_checkable
class IAuditRepository(Protocol):
    """Log de auditoría."""

    def load(self) -> List[Dict[str, Any]]:
        ...

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Dict[str, Any] = None
    ) -> None:
        ...
