# ==============================================================================
# REPOSITORIO DE CONFIGURACIÓN DE LA TIENDA
# ==============================================================================
# Encapsula el acceso a settings.json. Solo existe el documento "shop":
# {"shop": {"is_open": true, "shift_start_at": "2025-10-19T17:00:00+00:00"}}
# ==============================================================================

import os
from typing import Any, Dict
from .base import CollectionRepository


class SettingsRepository(CollectionRepository):
    """Colección settings con el documento único de la tienda."""

    SHOP_DOC = 'shop'

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'settings.json'))

    def get_shop(self) -> Dict[str, Any]:
        """
        Obtiene el documento de la tienda.

        Returns:
            Datos del documento (vacío si nunca se ha guardado)
        """
        return self.get_by_id(self.SHOP_DOC) or {}

    def save_shop(self, fields: Dict[str, Any]) -> None:
        """Combina los campos dados con el documento de la tienda."""
        self.set(self.SHOP_DOC, fields, merge=True)
