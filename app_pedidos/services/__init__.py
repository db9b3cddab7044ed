# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Esta capa contiene TODA la lógica de negocio de la aplicación.
#
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Aplican reglas de negocio y validaciones
# 3. Las rutas (controllers) solo llaman a servicios
# 4. El estado de la tienda (ShopSettings) se pasa explícitamente
#
# ESTRUCTURA:
# ├── order_flow.py           → Máquina de estados del pedido
# ├── order_filters.py        → Filtros por turno / hoy / 7 días / todos
# ├── order_board.py          → Tablero kanban optimista + escritura en 2º plano
# ├── order_service.py        → Checkout y lectura de pedidos
# ├── cart_service.py         → Carrito de la sesión
# ├── catalog_service.py      → Productos, categorías, restablecer menú
# ├── shop_service.py         → Abrir/cerrar tienda (turnos)
# ├── stats_service.py        → Métricas del panel
# ├── notification_service.py → Pedidos nuevos para la campana
# ├── image_service.py        → Cloudinary + generación de imágenes
# ├── ticket_service.py       → Ticket de cocina
# └── audit_service.py        → Logs de actividad
# ==============================================================================

from app_pedidos.services.audit_service import AuditService
from app_pedidos.services.cart_service import Cart, CartService
from app_pedidos.services.catalog_service import CatalogService
from app_pedidos.services.image_service import ImageService, ImageServiceError
from app_pedidos.services.notification_service import NotificationService
from app_pedidos.services.order_board import BoardRegistry, OrderBoard, StatusWriter
from app_pedidos.services.order_service import OrderService
from app_pedidos.services.shop_service import ShopService
from app_pedidos.services.stats_service import StatsService

__all__ = [
    'AuditService',
    'Cart',
    'CartService',
    'CatalogService',
    'ImageService',
    'ImageServiceError',
    'NotificationService',
    'BoardRegistry',
    'OrderBoard',
    'StatusWriter',
    'OrderService',
    'ShopService',
    'StatsService',
]
