# ==============================================================================
# FILTROS DEL TABLERO DE PEDIDOS
# ==============================================================================
# Alcance temporal de los pedidos mostrados en el tablero:
#   - current-shift: desde el inicio del turno (requiere tienda abierta)
#   - today:         desde la medianoche local
#   - last-7-days:   últimos 7 días
#   - all:           todos
#
# El modo elegido se recuerda por navegador en la cookie 'order_filter'.
# ==============================================================================

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from app_pedidos.formatting import days_back, local_now, start_of_day
from app_pedidos.models.entities import Order, OrderFilterMode, ShopSettings


FILTER_COOKIE = 'order_filter'
DEFAULT_FILTER = OrderFilterMode.CURRENT_SHIFT

FILTER_LABELS = {
    OrderFilterMode.CURRENT_SHIFT: 'Turno actual',
    OrderFilterMode.TODAY: 'Hoy',
    OrderFilterMode.LAST_7_DAYS: 'Últimos 7 días',
    OrderFilterMode.ALL: 'Todos',
}


@dataclass
class FilterResult:
    """
    Resultado de filtrar pedidos.

    Attributes:
        orders: Pedidos que cumplen el filtro
        mode: Modo aplicado (tras normalizar)
        no_active_shift: True si se pidió el turno actual sin turno activo
    """
    orders: List[Order] = field(default_factory=list)
    mode: OrderFilterMode = DEFAULT_FILTER
    no_active_shift: bool = False


def parse_mode(raw: Optional[str]) -> OrderFilterMode:
    """Convierte el valor de la query/cookie a un modo; desconocido → turno actual."""
    if isinstance(raw, OrderFilterMode):
        return raw
    try:
        return OrderFilterMode((raw or '').strip())
    except ValueError:
        return DEFAULT_FILTER


def filter_orders(
    orders: List[Order],
    mode,
    settings: ShopSettings,
    now: Optional[datetime] = None
) -> FilterResult:
    """
    Filtra pedidos por alcance temporal.

    Args:
        orders: Pedidos a filtrar
        mode: OrderFilterMode o su valor string
        settings: Estado de la tienda (para el turno actual)
        now: Hora de referencia con zona horaria (por defecto, hora local)

    Returns:
        FilterResult. Con 'current-shift' y sin turno activo la lista es
        vacía y no_active_shift=True.
    """
    mode = parse_mode(mode)
    now = now or local_now()

    if mode == OrderFilterMode.ALL:
        return FilterResult(orders=list(orders), mode=mode)

    if mode == OrderFilterMode.CURRENT_SHIFT:
        if not settings.has_active_shift:
            return FilterResult(orders=[], mode=mode, no_active_shift=True)
        since = settings.shift_start_at
    elif mode == OrderFilterMode.TODAY:
        since = start_of_day(now)
    else:
        since = days_back(now, 7)

    selected = [o for o in orders if o.order_date is not None and o.order_date >= since]
    return FilterResult(orders=selected, mode=mode)
