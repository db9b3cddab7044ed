# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso al almacén de documentos (JSON local).
#
# ESTRUCTURA:
# ├── interfaces.py          → Protocolos (contratos de cada colección)
# ├── base.py                → Colecciones JSON, suscripciones, SERVER_TIMESTAMP
# ├── catalog_repository.py  → products.json, categories.json
# ├── order_repository.py    → orders.json
# ├── settings_repository.py → settings.json (documento "shop")
# └── audit_repository.py    → audit.json
# ==============================================================================

from .interfaces import (
    IRepository,
    ICollectionRepository,
    IOrderRepository,
    ISettingsRepository,
    IAuditRepository,
)

from .base import BaseRepository, CollectionRepository, ListRepository, SERVER_TIMESTAMP
from .catalog_repository import CategoryRepository, ProductRepository
from .order_repository import OrderRepository
from .settings_repository import SettingsRepository
from .audit_repository import AuditRepository

__all__ = [
    # Interfaces
    'IRepository',
    'ICollectionRepository',
    'IOrderRepository',
    'ISettingsRepository',
    'IAuditRepository',

    # Clases base
    'BaseRepository',
    'CollectionRepository',
    'ListRepository',
    'SERVER_TIMESTAMP',

    # Implementaciones JSON
    'CategoryRepository',
    'ProductRepository',
    'OrderRepository',
    'SettingsRepository',
    'AuditRepository',
]
