# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio (catálogo, pedidos, tienda).
# Diseñadas para ser independientes del almacén de documentos: los
# repositorios guardan diccionarios y los servicios trabajan con entidades.
# ==============================================================================

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum
from datetime import datetime, timezone


# ==============================================================================
# ENUMERACIONES - Estados y tipos válidos
# ==============================================================================

class OrderStatus(str, Enum):
    """Estados del ciclo de vida de un pedido."""
    PENDIENTE_PAGO = "PENDIENTE_PAGO"    # Nuevo, esperando confirmación de pago
    EN_PREPARACION = "EN_PREPARACION"    # Pago confirmado, en cocina
    LISTO_REPARTO = "LISTO_REPARTO"      # Listo para salir a domicilio
    COMPLETADO = "COMPLETADO"            # Entregado
    CANCELADO = "CANCELADO"              # Cancelado (ninguna acción lo produce)


class PaymentMethod(str, Enum):
    """Métodos de pago aceptados en el checkout."""
    EFECTIVO = "EFECTIVO"
    TRANSFERENCIA = "TRANSFERENCIA"


class OrderFilterMode(str, Enum):
    """Alcance temporal del tablero de pedidos."""
    CURRENT_SHIFT = "current-shift"
    TODAY = "today"
    LAST_7_DAYS = "last-7-days"
    ALL = "all"


# ==============================================================================
# FECHAS - Serialización de timestamps
# ==============================================================================

def utcnow() -> datetime:
    """Hora actual con zona horaria UTC."""
    return datetime.now(timezone.utc)


def parse_ts(value: Any) -> Optional[datetime]:
    """
    Parsea un timestamp ISO guardado en JSON.
    Los timestamps sin zona horaria se asumen UTC.

    Returns:
        datetime con zona horaria, o None si no se puede parsear
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
        except (ValueError, TypeError):
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_ts(value: Optional[datetime]) -> Optional[str]:
    """Serializa un datetime a ISO (None se conserva)."""
    if value is None:
        return None
    return value.isoformat()


# ==============================================================================
# ENTIDADES DE CATÁLOGO
# ==============================================================================

@dataclass
class Category:
    """
    Categoría del menú.

    Attributes:
        id: Identificador del documento
        name: Nombre visible (único)
    """
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        return {'name': self.name}

    @classmethod
    def from_dict(cls, category_id: str, data: Dict[str, Any]) -> 'Category':
        """Crea instancia desde diccionario."""
        return cls(id=category_id, name=data.get('name', ''))


@dataclass
class Product:
    """
    Producto del menú.

    Attributes:
        id: Identificador del documento
        name: Nombre del producto
        description: Descripción para la carta
        price: Precio en pesos (entero, sin decimales)
        category_id: Referencia a la categoría
        image_url: URL de la imagen (CDN o data URI)
        image_hint: Pista de texto para la imagen
    """
    id: str
    name: str
    description: str = ''
    price: int = 0
    category_id: str = ''
    image_url: str = ''
    image_hint: str = ''

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        return {
            'name': self.name,
            'description': self.description,
            'price': self.price,
            'category_id': self.category_id,
            'image_url': self.image_url,
            'image_hint': self.image_hint,
        }

    def to_public_dict(self, category_name: str = '') -> Dict[str, Any]:
        """Representación para la API (incluye id y nombre de categoría)."""
        data = self.to_dict()
        data['id'] = self.id
        data['category'] = category_name
        return data

    @classmethod
    def from_dict(cls, product_id: str, data: Dict[str, Any]) -> 'Product':
        """Crea instancia desde diccionario."""
        return cls(
            id=product_id,
            name=data.get('name', ''),
            description=data.get('description', ''),
            price=int(data.get('price', 0) or 0),
            category_id=data.get('category_id', ''),
            image_url=data.get('image_url', ''),
            image_hint=data.get('image_hint', ''),
        )


# ==============================================================================
# ENTIDADES DE PEDIDO
# ==============================================================================

@dataclass
class OrderItem:
    """
    Línea de un pedido. El precio queda congelado al momento de la compra.
    """
    product_id: str
    product_name: str
    quantity: int
    unit_price: int

    @property
    def line_total(self) -> int:
        return self.quantity * self.unit_price

    def to_dict(self) -> Dict[str, Any]:
        return {
            'product_id': self.product_id,
            'product_name': self.product_name,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OrderItem':
        return cls(
            product_id=data.get('product_id', ''),
            product_name=data.get('product_name', ''),
            quantity=int(data.get('quantity', 0) or 0),
            unit_price=int(data.get('unit_price', 0) or 0),
        )


@dataclass
class Order:
    """
    Pedido realizado desde la tienda.

    Se crea una sola vez en el checkout y después solo cambia de estado.
    Nunca se elimina.

    Attributes:
        id: Identificador del documento
        customer_id: Cliente anónimo que hizo el pedido
        customer_name: Nombre de entrega
        customer_phone: Teléfono de contacto
        customer_address: Dirección de entrega
        items: Líneas del pedido
        total_amount: Total en pesos
        payment_method: EFECTIVO o TRANSFERENCIA
        status: Estado actual (OrderStatus)
        order_date: Fecha asignada por el almacén al insertar
        confirmed_at: Paso a EN_PREPARACION
        ready_at: Paso a LISTO_REPARTO
        completed_at: Paso a COMPLETADO
        notes: Nota opcional del cliente
    """
    id: str
    customer_id: str
    customer_name: str
    customer_phone: str
    customer_address: str
    items: List[OrderItem] = field(default_factory=list)
    total_amount: int = 0
    payment_method: PaymentMethod = PaymentMethod.EFECTIVO
    status: OrderStatus = OrderStatus.PENDIENTE_PAGO
    order_date: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    ready_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    notes: str = ''

    @property
    def short_id(self) -> str:
        """Primeros 5 caracteres del id (para tickets y tarjetas)."""
        return self.id[:5]

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        d = {
            'customer_id': self.customer_id,
            'customer_name': self.customer_name,
            'customer_phone': self.customer_phone,
            'customer_address': self.customer_address,
            'items': [item.to_dict() for item in self.items],
            'total_amount': self.total_amount,
            'payment_method': self.payment_method.value,
            'status': self.status.value,
            'order_date': format_ts(self.order_date),
        }
        for key in ('confirmed_at', 'ready_at', 'completed_at'):
            value = getattr(self, key)
            if value is not None:
                d[key] = format_ts(value)
        if self.notes:
            d['notes'] = self.notes
        return d

    def to_public_dict(self) -> Dict[str, Any]:
        """Representación para la API."""
        data = self.to_dict()
        data['id'] = self.id
        return data

    @classmethod
    def from_dict(cls, order_id: str, data: Dict[str, Any]) -> 'Order':
        """Crea instancia desde diccionario."""
        try:
            status = OrderStatus(data.get('status', 'PENDIENTE_PAGO'))
        except ValueError:
            status = OrderStatus.PENDIENTE_PAGO
        try:
            method = PaymentMethod(data.get('payment_method', 'EFECTIVO'))
        except ValueError:
            method = PaymentMethod.EFECTIVO
        return cls(
            id=order_id,
            customer_id=data.get('customer_id', ''),
            customer_name=data.get('customer_name', ''),
            customer_phone=data.get('customer_phone', ''),
            customer_address=data.get('customer_address', ''),
            items=[OrderItem.from_dict(i) for i in data.get('items', [])],
            total_amount=int(data.get('total_amount', 0) or 0),
            payment_method=method,
            status=status,
            order_date=parse_ts(data.get('order_date')),
            confirmed_at=parse_ts(data.get('confirmed_at')),
            ready_at=parse_ts(data.get('ready_at')),
            completed_at=parse_ts(data.get('completed_at')),
            notes=data.get('notes', '') or '',
        )


# ==============================================================================
# CONFIGURACIÓN DE LA TIENDA
# ==============================================================================

@dataclass(frozen=True)
class ShopSettings:
    """
    Estado de la tienda (documento único settings/shop).

    Es un valor inmutable que se pasa explícitamente a los servicios que lo
    necesitan (carrito, checkout, filtros, métricas).

    Attributes:
        is_open: True si se aceptan pedidos
        shift_start_at: Inicio del turno actual (se fija al abrir)
    """
    is_open: bool = False
    shift_start_at: Optional[datetime] = None

    @property
    def has_active_shift(self) -> bool:
        """Hay turno activo solo si la tienda está abierta y tiene inicio."""
        return self.is_open and self.shift_start_at is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_open': self.is_open,
            'shift_start_at': format_ts(self.shift_start_at),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ShopSettings':
        data = data or {}
        return cls(
            is_open=bool(data.get('is_open', False)),
            shift_start_at=parse_ts(data.get('shift_start_at')),
        )
