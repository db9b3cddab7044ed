# ==============================================================================
# SERVICIO DE ESTADÍSTICAS DEL PANEL
# ==============================================================================
# Métricas del dashboard calculadas sobre la lista completa de pedidos en
# cada consulta (sin agregados guardados).
#
# REGLA PRINCIPAL: solo COMPLETADO cuenta como ingreso.
# - PENDIENTE_PAGO ❌
# - EN_PREPARACION ❌
# - LISTO_REPARTO ❌
# - CANCELADO ❌
# ==============================================================================

from typing import Any, Callable, Dict, List, Optional
from datetime import datetime, timedelta
from collections import defaultdict

from app_pedidos.formatting import format_cop, local_now, short_date_label, start_of_day
from app_pedidos.models.entities import Order, OrderStatus, ShopSettings
from app_pedidos.services.order_flow import is_active
from app_pedidos.services.order_service import sort_newest_first


class StatsService:
    """
    Servicio para las métricas del panel de administración.

    Responsabilidades:
    - KPIs: pedidos activos, ingresos (total, turno, hoy), ticket promedio
    - Productos más vendidos
    - Ventas de los últimos 7 días
    - Pedidos recientes
    """

    VALID_STATUS = OrderStatus.COMPLETADO
    TOP_PRODUCTS_LIMIT = 5
    RECENT_ORDERS_LIMIT = 5
    RECENT_SALES_DAYS = 7

    def __init__(self, orders_loader: Callable[[], List[Order]] = None):
        """
        Inicializa el servicio.

        Args:
            orders_loader: Función que retorna la lista de pedidos.
                           Permite inyectar la fuente en tests.
        """
        self._orders_loader = orders_loader

    def _load_orders(self) -> List[Order]:
        if self._orders_loader:
            return self._orders_loader()
        return []

    @staticmethod
    def _local_date(value: datetime, now: datetime):
        return value.astimezone(now.tzinfo).date()

    def compute(
        self,
        settings: ShopSettings,
        now: Optional[datetime] = None,
        orders: Optional[List[Order]] = None
    ) -> Dict[str, Any]:
        """
        Calcula todas las métricas del dashboard.

        Args:
            settings: Estado de la tienda (para ingresos del turno)
            now: Hora de referencia con zona horaria (por defecto, hora local)
            orders: Pedidos a usar (por defecto, los del loader)

        Returns:
            Dict con KPIs, top_products, recent_sales y recent_orders
        """
        now = now or local_now()
        orders = self._load_orders() if orders is None else orders
        completed = [o for o in orders if o.status == self.VALID_STATUS]
        today_start = start_of_day(now)

        total_revenue = sum(o.total_amount for o in completed)
        completed_count = len(completed)
        avg_ticket = total_revenue // completed_count if completed_count else 0

        if settings.has_active_shift:
            shift_revenue = sum(
                o.total_amount for o in completed
                if o.order_date is not None and o.order_date >= settings.shift_start_at
            )
        else:
            shift_revenue = 0

        today_orders = [o for o in completed if o.order_date is not None and o.order_date >= today_start]
        today_revenue = sum(o.total_amount for o in today_orders)

        return {
            'active_orders': sum(1 for o in orders if is_active(o.status)),
            'total_revenue': total_revenue,
            'shift_revenue': shift_revenue,
            'today_revenue': today_revenue,
            'today_orders': len(today_orders),
            'completed_orders': completed_count,
            'avg_ticket': avg_ticket,
            'has_active_shift': settings.has_active_shift,
            'formatted': {
                'total_revenue': format_cop(total_revenue),
                'shift_revenue': format_cop(shift_revenue),
                'today_revenue': format_cop(today_revenue),
                'avg_ticket': format_cop(avg_ticket),
            },
            'top_products': self.top_products(completed),
            'recent_sales': self.recent_sales(completed, now),
            'recent_orders': [o.to_public_dict() for o in self.recent_orders(orders)],
        }

    def top_products(self, completed: List[Order]) -> List[Dict[str, Any]]:
        """
        Productos más vendidos por unidades (pedidos completados).

        Returns:
            Hasta 5 entradas {product_id, name, units, revenue}
        """
        stats: Dict[str, Dict[str, Any]] = defaultdict(
            lambda: {'name': '', 'units': 0, 'revenue': 0}
        )
        for order in completed:
            for item in order.items:
                entry = stats[item.product_id]
                entry['name'] = item.product_name
                entry['units'] += item.quantity
                entry['revenue'] += item.line_total

        ranked = sorted(stats.items(), key=lambda kv: kv[1]['units'], reverse=True)
        return [
            {'product_id': pid, **entry}
            for pid, entry in ranked[:self.TOP_PRODUCTS_LIMIT]
        ]

    def recent_sales(self, completed: List[Order], now: datetime) -> List[Dict[str, Any]]:
        """
        Ingresos por día de los últimos 7 días (del más antiguo a hoy).

        Returns:
            7 entradas {date, label, revenue}; label tipo '19 oct'
        """
        today = now.date()
        days = [today - timedelta(days=offset) for offset in range(self.RECENT_SALES_DAYS - 1, -1, -1)]
        revenue_by_day = {day: 0 for day in days}
        for order in completed:
            if order.order_date is None:
                continue
            day = self._local_date(order.order_date, now)
            if day in revenue_by_day:
                revenue_by_day[day] += order.total_amount
        return [
            {'date': day.isoformat(), 'label': short_date_label(day), 'revenue': revenue_by_day[day]}
            for day in days
        ]

    def recent_orders(self, orders: List[Order]) -> List[Order]:
        return sort_newest_first(orders)[:self.RECENT_ORDERS_LIMIT]
