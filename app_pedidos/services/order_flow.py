# ==============================================================================
# FLUJO DE ESTADOS DEL PEDIDO
# ==============================================================================
# Máquina de estados lineal del tablero de pedidos:
#
#   PENDIENTE_PAGO → EN_PREPARACION → LISTO_REPARTO → COMPLETADO
#
# Cada estado activo puede avanzar al siguiente o retroceder al anterior.
# CANCELADO no tiene transiciones y ninguna acción del tablero lo produce.
# El almacén no valida transiciones; esta tabla solo define lo que el
# tablero ofrece.
# ==============================================================================

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from app_pedidos.models.entities import OrderStatus, format_ts, utcnow


StatusLike = Union[OrderStatus, str]

_NEXT: Dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDIENTE_PAGO: OrderStatus.EN_PREPARACION,
    OrderStatus.EN_PREPARACION: OrderStatus.LISTO_REPARTO,
    OrderStatus.LISTO_REPARTO: OrderStatus.COMPLETADO,
}

_PREV: Dict[OrderStatus, OrderStatus] = {
    OrderStatus.EN_PREPARACION: OrderStatus.PENDIENTE_PAGO,
    OrderStatus.LISTO_REPARTO: OrderStatus.EN_PREPARACION,
    OrderStatus.COMPLETADO: OrderStatus.LISTO_REPARTO,
}

_TIMESTAMP_FIELDS: Dict[OrderStatus, str] = {
    OrderStatus.EN_PREPARACION: 'confirmed_at',
    OrderStatus.LISTO_REPARTO: 'ready_at',
    OrderStatus.COMPLETADO: 'completed_at',
}

TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETADO, OrderStatus.CANCELADO})

# Columnas del tablero (CANCELADO no tiene columna)
KANBAN_COLUMNS: List[OrderStatus] = [
    OrderStatus.PENDIENTE_PAGO,
    OrderStatus.EN_PREPARACION,
    OrderStatus.LISTO_REPARTO,
    OrderStatus.COMPLETADO,
]

STATUS_LABELS: Dict[OrderStatus, str] = {
    OrderStatus.PENDIENTE_PAGO: 'Pendiente de Pago',
    OrderStatus.EN_PREPARACION: 'En Preparación',
    OrderStatus.LISTO_REPARTO: 'Listo para Reparto',
    OrderStatus.COMPLETADO: 'Completado',
    OrderStatus.CANCELADO: 'Cancelado',
}

# Texto del botón que avanza desde cada estado
ACTION_LABELS: Dict[OrderStatus, str] = {
    OrderStatus.PENDIENTE_PAGO: 'Confirmar Pago',
    OrderStatus.EN_PREPARACION: 'Pedido Listo',
    OrderStatus.LISTO_REPARTO: 'Completar Pedido',
}


def coerce_status(status: StatusLike) -> Optional[OrderStatus]:
    """Convierte un string a OrderStatus; None si no es un estado válido."""
    if isinstance(status, OrderStatus):
        return status
    try:
        return OrderStatus(str(status))
    except ValueError:
        return None


def next_status(status: StatusLike) -> Optional[OrderStatus]:
    """Estado siguiente, o None si no hay avance posible."""
    current = coerce_status(status)
    return _NEXT.get(current) if current else None


def prev_status(status: StatusLike) -> Optional[OrderStatus]:
    """Estado anterior, o None si no se puede retroceder."""
    current = coerce_status(status)
    return _PREV.get(current) if current else None


def allowed_targets(status: StatusLike) -> List[OrderStatus]:
    """
    Destinos que el tablero ofrece desde un estado.

    Returns:
        Lista con el siguiente y/o el anterior (vacía para CANCELADO)
    """
    return [s for s in (next_status(status), prev_status(status)) if s is not None]


def is_terminal(status: StatusLike) -> bool:
    return coerce_status(status) in TERMINAL_STATUSES


def is_active(status: StatusLike) -> bool:
    """Activo = no terminal (cuenta en 'pedidos activos')."""
    current = coerce_status(status)
    return current is not None and current not in TERMINAL_STATUSES


def transition_timestamp_field(target: StatusLike) -> Optional[str]:
    """Campo de timestamp que se sella al entrar en `target`."""
    current = coerce_status(target)
    return _TIMESTAMP_FIELDS.get(current) if current else None


def build_status_update(target: StatusLike, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Construye el documento parcial de un cambio de estado.

    Args:
        target: Estado destino
        now: Hora de la transición (por defecto, ahora en UTC)

    Returns:
        {'status': ..., '<campo_timestamp>': iso} (sin timestamp al volver
        a PENDIENTE_PAGO)

    Raises:
        ValueError: Si el estado no es válido
    """
    current = coerce_status(target)
    if current is None:
        raise ValueError(f"Estado inválido: {target}")
    update: Dict[str, Any] = {'status': current.value}
    field_name = transition_timestamp_field(current)
    if field_name:
        update[field_name] = format_ts(now or utcnow())
    return update


def status_label(status: StatusLike) -> str:
    current = coerce_status(status)
    return STATUS_LABELS.get(current, str(status)) if current else str(status)


def action_label(status: StatusLike) -> Optional[str]:
    current = coerce_status(status)
    return ACTION_LABELS.get(current) if current else None
