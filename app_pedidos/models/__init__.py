# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Entidades del dominio definidas con dataclasses:
#   - Catálogo: Category, Product
#   - Pedidos: Order, OrderItem, OrderStatus, PaymentMethod
#   - Tienda: ShopSettings
#   - Tablero: OrderFilterMode
# ==============================================================================

from .entities import (
    # Catálogo
    Category,
    Product,

    # Pedidos
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    OrderFilterMode,

    # Tienda
    ShopSettings,

    # Fechas
    utcnow,
    parse_ts,
    format_ts,
)

__all__ = [
    'Category',
    'Product',
    'Order',
    'OrderItem',
    'OrderStatus',
    'PaymentMethod',
    'OrderFilterMode',
    'ShopSettings',
    'utcnow',
    'parse_ts',
    'format_ts',
]
