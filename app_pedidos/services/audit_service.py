# ==============================================================================
# SERVICIO DE AUDITORÍA
# ==============================================================================
# Centraliza el registro de auditoría con mensajes humanizados.
# ==============================================================================

from typing import Any, Dict, List

from app_pedidos.formatting import format_cop
from app_pedidos.repositories.audit_repository import AuditRepository
from app_pedidos.services.order_flow import status_label


class AuditService:
    """
    Servicio para registro y consulta de auditoría.

    Tipos de evento: PEDIDO, CATALOGO, TIENDA, SISTEMA.
    """

    TYPE_PEDIDO = 'PEDIDO'
    TYPE_CATALOGO = 'CATALOGO'
    TYPE_TIENDA = 'TIENDA'
    TYPE_SISTEMA = 'SISTEMA'

    def __init__(self, audit_repo: AuditRepository):
        self.audit_repo = audit_repo

    # =========================================================================
    # REGISTRO DE EVENTOS
    # =========================================================================

    def log(
        self,
        log_type: str,
        user: str,
        message: str,
        related_id: str = '',
        details: Dict[str, Any] = None
    ) -> None:
        self.audit_repo.log(log_type, user, message, related_id, details)

    def log_order_created(self, order_id: str, customer_name: str, total: int, method: str) -> None:
        """
        Registra un pedido nuevo desde la tienda.

        Args:
            order_id: ID del pedido
            customer_name: Nombre del cliente
            total: Total del pedido
            method: Método de pago
        """
        message = f"Pedido {order_id[:5]} de {customer_name} - Total: {format_cop(total)} ({method})"
        self.log(self.TYPE_PEDIDO, 'tienda', message, order_id,
                 {'total': total, 'payment_method': method})

    def log_status_change(self, user: str, order_id: str, old_status: str, new_status: str) -> None:
        message = (f"Pedido {order_id[:5]}: {status_label(old_status)} → "
                   f"{status_label(new_status)} por {user}")
        self.log(self.TYPE_PEDIDO, user, message, order_id,
                 {'from': old_status, 'to': new_status})

    def log_catalog_change(self, user: str, action: str, entity: str, name: str, related_id: str = '') -> None:
        """
        Registra una escritura del catálogo.

        Args:
            user: Sesión de administrador
            action: 'creado', 'actualizado' o 'eliminado'
            entity: 'Producto' o 'Categoría'
            name: Nombre visible de la entidad
            related_id: ID de la entidad
        """
        message = f"{entity} '{name}' {action} por {user}"
        self.log(self.TYPE_CATALOGO, user, message, related_id, {'action': action})

    def log_catalog_reset(self, user: str, categories: int, products: int) -> None:
        message = f"Menú restablecido por {user}: {categories} categorías, {products} productos"
        self.log(self.TYPE_CATALOGO, user, message, '',
                 {'categories': categories, 'products': products})

    def log_shop_toggle(self, user: str, is_open: bool) -> None:
        message = f"Tienda {'abierta' if is_open else 'cerrada'} por {user}"
        self.log(self.TYPE_TIENDA, user, message, 'shop', {'is_open': is_open})

    def log_session(self, user: str, action: str) -> None:
        """Registra inicio o cierre de sesión de administrador."""
        message = f"Administrador {user}: {action}"
        self.log(self.TYPE_SISTEMA, user, message)

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def get_logs(self, log_type: str = None, limit: int = 100) -> List[Dict[str, Any]]:
        """
        Logs más recientes primero.

        Args:
            log_type: Filtrar por tipo (opcional)
            limit: Máximo de registros

        Returns:
            Lista de logs
        """
        logs = self.audit_repo.get_logs_by_type(log_type) if log_type else self.audit_repo.load()
        return logs[:limit]
