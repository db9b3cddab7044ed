# ==============================================================================
# TICKET DE COCINA
# ==============================================================================
# Ticket en texto plano para imprimir en impresora térmica (40 columnas).
# Cada línea muestra cantidad, producto y precio unitario.
# ==============================================================================

from app_pedidos import config
from app_pedidos.formatting import format_cop, format_datetime
from app_pedidos.models.entities import Order

TICKET_WIDTH = 40


def _line(left: str, right: str, width: int = TICKET_WIDTH) -> str:
    """Texto a la izquierda y monto alineado a la derecha."""
    space = max(width - len(left) - len(right), 2)
    return f"{left}{' ' * space}{right}"


def render_ticket(order: Order, shop_name: str = None) -> str:
    """
    Genera el ticket de cocina de un pedido.

    Args:
        order: Pedido a imprimir
        shop_name: Nombre de la tienda (por defecto config.SHOP_NAME)

    Returns:
        Texto del ticket
    """
    shop_name = (shop_name or config.SHOP_NAME).upper()
    dash = '-' * TICKET_WIDTH

    lines = [
        shop_name.center(TICKET_WIDTH).rstrip(),
        'TICKET DE COCINA'.center(TICKET_WIDTH).rstrip(),
        f"Pedido: #{order.short_id}",
        format_datetime(order.order_date) or 'N/A',
        dash,
        'CLIENTE:',
        order.customer_name,
        order.customer_address,
        order.customer_phone,
        dash,
    ]
    if order.notes:
        lines.extend(['NOTA:', order.notes, dash])

    for item in order.items:
        lines.append(_line(f"{item.quantity}x {item.product_name}", format_cop(item.unit_price)))

    lines.extend([
        dash,
        f"TOTAL: {format_cop(order.total_amount)}".rjust(TICKET_WIDTH),
        f"Método: {order.payment_method.value}".rjust(TICKET_WIDTH),
    ])
    return '\n'.join(lines) + '\n'
