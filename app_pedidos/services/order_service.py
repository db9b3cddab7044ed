# ==============================================================================
# SERVICIO DE PEDIDOS
# ==============================================================================
# Checkout (creación del pedido desde el carrito) y lecturas de pedidos.
# ==============================================================================

from typing import Any, Dict, List, Optional

from app_pedidos import config
from app_pedidos.models.entities import (
    Order, OrderItem, OrderStatus, PaymentMethod, ShopSettings
)
from app_pedidos.repositories.order_repository import OrderRepository
from app_pedidos.services.audit_service import AuditService
from app_pedidos.services.cart_service import Cart


def payment_instructions(method: PaymentMethod) -> Dict[str, Any]:
    """Texto de la página de confirmación según el método de pago."""
    if method == PaymentMethod.TRANSFERENCIA:
        return {
            'message': ('Para completar tu pedido, por favor realiza la transferencia '
                        'a una de las siguientes cuentas y envía el comprobante a '
                        'nuestro WhatsApp.'),
            'accounts': list(config.TRANSFER_ACCOUNTS),
        }
    return {
        'message': ('Prepara tu efectivo. Nuestro domiciliario te cobrará al momento '
                    'de la entrega. ¡Gracias por tu compra!'),
        'accounts': [],
    }


class OrderService:
    """
    Servicio de pedidos.

    Responsabilidades:
    - Validar y crear pedidos desde el carrito (checkout)
    - Leer pedidos como entidades Order
    """

    REQUIRED_FIELDS = {
        'name': 'El nombre es obligatorio',
        'phone': 'El teléfono es obligatorio',
        'address': 'La dirección es obligatoria',
    }

    def __init__(self, order_repo: OrderRepository, audit_service: AuditService):
        self.order_repo = order_repo
        self.audit_service = audit_service

    # =========================================================================
    # LECTURAS
    # =========================================================================

    def list_orders(self) -> List[Order]:
        """Todos los pedidos, más recientes primero."""
        orders = [Order.from_dict(doc_id, data) for doc_id, data in self.order_repo.list_documents()]
        return sort_newest_first(orders)

    def get_order(self, order_id: str) -> Optional[Order]:
        data = self.order_repo.get_by_id(order_id)
        return Order.from_dict(order_id, data) if data else None

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    def checkout(
        self,
        cart: Cart,
        customer_data: Dict[str, Any],
        payment_method: Any,
        settings: ShopSettings,
        customer_id: str,
        notes: str = ''
    ) -> Dict[str, Any]:
        """
        Crea un pedido a partir del carrito.

        Args:
            cart: Carrito del cliente
            customer_data: {'name', 'phone', 'address'}
            payment_method: 'EFECTIVO' o 'TRANSFERENCIA'
            settings: Estado de la tienda
            customer_id: ID anónimo del cliente
            notes: Nota opcional del pedido

        Returns:
            Dict con ok, order_id, total_amount, payment_method e
            instructions; o ok=False con error/errors. En éxito el carrito
            queda vacío.
        """
        if not settings.is_open:
            return {'ok': False, 'error': 'La tienda está cerrada. No se reciben pedidos.'}
        if cart.is_empty:
            return {'ok': False, 'error': 'Tu carrito está vacío'}

        customer_data = customer_data or {}
        errors = {}
        for key, message in self.REQUIRED_FIELDS.items():
            if not str(customer_data.get(key) or '').strip():
                errors[key] = message
        try:
            method = PaymentMethod(str(payment_method or '').upper())
        except ValueError:
            method = None
            errors['payment_method'] = 'Selecciona un método de pago válido'
        if errors:
            return {'ok': False, 'error': 'Revisa los datos del pedido', 'errors': errors}

        items = [
            OrderItem(
                product_id=product_id,
                product_name=line['product'].get('name', ''),
                quantity=line['quantity'],
                unit_price=int(line['product'].get('price', 0)),
            )
            for product_id, line in cart.lines.items()
        ]
        total = cart.total_price

        fields = {
            'customer_id': customer_id,
            'customer_name': str(customer_data['name']).strip(),
            'customer_phone': str(customer_data['phone']).strip(),
            'customer_address': str(customer_data['address']).strip(),
            'items': [item.to_dict() for item in items],
            'total_amount': total,
            'payment_method': method.value,
            'status': OrderStatus.PENDIENTE_PAGO.value,
        }
        notes = (notes or '').strip()
        if notes:
            fields['notes'] = notes

        try:
            order_id = self.order_repo.create_order(fields)
        except OSError as e:
            print(f"[ERROR] No se pudo guardar el pedido: {e}")
            return {'ok': False, 'error': 'No se pudo enviar el pedido. Intenta de nuevo.'}

        cart.clear()
        self.audit_service.log_order_created(order_id, fields['customer_name'], total, method.value)

        return {
            'ok': True,
            'order_id': order_id,
            'total_amount': total,
            'payment_method': method.value,
            'instructions': payment_instructions(method),
        }


def sort_newest_first(orders: List[Order]) -> List[Order]:
    """Ordena por order_date descendente; sin fecha al final."""
    dated = [o for o in orders if o.order_date is not None]
    undated = [o for o in orders if o.order_date is None]
    return sorted(dated, key=lambda o: o.order_date, reverse=True) + undated
