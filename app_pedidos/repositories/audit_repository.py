# ==============================================================================
# REPOSITORIO DE AUDITORÍA
# ==============================================================================
# Bitácora del panel en audit.json: cambios de estado de pedidos, ediciones
# del menú, apertura y cierre de la tienda, sesiones de administrador.
# Se guarda como lista, la entrada más nueva primero.
# ==============================================================================

import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from .base import ListRepository


class AuditRepository(ListRepository):
    """
    Bitácora de acciones del panel.

    Cada entrada de audit.json:
        {
            "type": "PEDIDO",
            "user": "admin:3f2a1",
            "message": "Pedido a1b2c pasó a En Preparación",
            "timestamp": "2025-10-19 22:15:03",
            "related_id": "a1b2c3d4e5...",
            "details": {"from": "PENDIENTE_PAGO", "to": "EN_PREPARACION"}
        }
    """

    # Entradas que se conservan; las más viejas se descartan al escribir
    RETENTION = 5000

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'audit.json'))

    @staticmethod
    def _entry(log_type: str, user: Optional[str], message: str,
               related_id: str, details: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            'type': log_type,
            'user': user or 'sistema',
            'message': message,
            'timestamp': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
            'related_id': related_id or '',
            'details': dict(details or {}),
        }

    def load(self) -> List[Dict[str, Any]]:
        """Todas las entradas, de la más reciente a la más antigua."""
        entries = self.get_all()
        entries.sort(key=lambda entry: entry.get('timestamp', ''), reverse=True)
        return entries

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Dict[str, Any] = None
    ) -> None:
        """
        Agrega una entrada a la bitácora.

        Args:
            log_type: PEDIDO, CATALOGO, TIENDA o SISTEMA
            user: Sesión de administrador ('sistema' si viene vacío)
            message: Texto que se muestra en el panel
            related_id: Pedido, producto o categoría afectado
            details: Datos extra (estados, nombres, precios)
        """
        entry = self._entry(log_type, user, message, related_id, details)
        with self._file_lock:
            entries = [entry] + self.get_all()
            self.save_all(entries[:self.RETENTION])

    def get_logs_by_type(self, log_type: str) -> List[Dict[str, Any]]:
        return [entry for entry in self.load() if entry.get('type') == log_type]
