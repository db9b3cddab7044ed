# ==============================================================================
# SERVICIO DE NOTIFICACIONES DE PEDIDOS NUEVOS
# ==============================================================================
# La campana del panel consulta periódicamente los pedidos PENDIENTE_PAGO.
# Cada pedido se notifica una sola vez por sesión de administrador; el
# registro de notificados vive en memoria y se pierde al reiniciar.
# ==============================================================================

import threading
from typing import Any, Dict, List, Set

from app_pedidos.formatting import format_cop
from app_pedidos.models.entities import Order, OrderStatus


class NotificationService:
    """Detección de pedidos nuevos para la campana y las notificaciones."""

    def __init__(self):
        self._notified: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def build_notification(order: Order) -> Dict[str, Any]:
        return {
            'order_id': order.id,
            'title': f"Nuevo pedido #{order.short_id}",
            'body': f"{order.customer_name} - {format_cop(order.total_amount)}",
            'play_sound': True,
        }

    def poll(self, orders: List[Order], session_key: str, permission_granted: bool) -> Dict[str, Any]:
        """
        Revisa pedidos pendientes y devuelve los que no se han notificado.

        Args:
            orders: Pedidos actuales
            session_key: Sesión de administrador que consulta
            permission_granted: True si el admin activó las notificaciones

        Returns:
            Dict con pending_count, requires_permission y notifications.
            Sin permiso no se marca ningún pedido como notificado.
        """
        pending = [o for o in orders if o.status == OrderStatus.PENDIENTE_PAGO]
        result: Dict[str, Any] = {
            'pending_count': len(pending),
            'requires_permission': not permission_granted,
            'notifications': [],
        }
        if not permission_granted:
            return result

        with self._lock:
            seen = self._notified.setdefault(session_key, set())
            fresh = [o for o in pending if o.id not in seen]
            seen.update(o.id for o in fresh)

        result['notifications'] = [self.build_notification(o) for o in fresh]
        return result

    def forget(self, session_key: str) -> None:
        """Olvida lo notificado a una sesión (al cerrar sesión)."""
        with self._lock:
            self._notified.pop(session_key, None)
