# ==============================================================================
# APP PEDIDOS - Tienda de comidas con pedidos a domicilio
# ==============================================================================
# Backend Flask de la tienda (menú, carrito, checkout) y del panel de
# administración (tablero de pedidos, catálogo, métricas, turnos).
# ==============================================================================

__version__ = '1.0.0'
