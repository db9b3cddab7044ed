# ==============================================================================
# SERVICIO DE CONFIGURACIÓN DE LA TIENDA
# ==============================================================================
# Abre y cierra la tienda. Al abrir se sella el inicio del turno, que usan
# el filtro "turno actual" y la métrica de ingresos del turno.
# ==============================================================================

from datetime import datetime
from typing import Any, Dict, Optional

from app_pedidos.models.entities import ShopSettings, format_ts, utcnow
from app_pedidos.repositories.settings_repository import SettingsRepository
from app_pedidos.services.audit_service import AuditService


class ShopService:
    """Lectura y cambio del estado abierto/cerrado de la tienda."""

    def __init__(self, settings_repo: SettingsRepository, audit_service: AuditService):
        self.settings_repo = settings_repo
        self.audit_service = audit_service

    def get_settings(self) -> ShopSettings:
        """Estado actual (cerrada si nunca se ha configurado)."""
        return ShopSettings.from_dict(self.settings_repo.get_shop())

    def set_open(self, is_open: bool, user: str = '', now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Abre o cierra la tienda.

        Cerrada → abierta sella shift_start_at con la hora actual; abrir una
        tienda ya abierta conserva el inicio del turno. Cerrar conserva el
        último shift_start_at (sin turno activo igualmente).

        Args:
            is_open: Nuevo estado
            user: Sesión que hace el cambio (auditoría)
            now: Hora del cambio (por defecto, ahora en UTC)

        Returns:
            Dict con ok y settings
        """
        current = self.get_settings()
        fields: Dict[str, Any] = {'is_open': bool(is_open)}
        if is_open and not current.is_open:
            fields['shift_start_at'] = format_ts(now or utcnow())
        self.settings_repo.save_shop(fields)

        updated = self.get_settings()
        if updated.is_open != current.is_open:
            self.audit_service.log_shop_toggle(user, updated.is_open)
        return {'ok': True, 'settings': updated.to_dict()}
