# ==============================================================================
# SERVICIO DE CARRITO
# ==============================================================================
# El carrito del cliente es efímero: vive en la sesión de Flask mientras dure
# la sesión del navegador. Se vacía tras un checkout exitoso, cada vez que
# la tienda está cerrada y cuando empieza un turno distinto al del carrito.
# ==============================================================================

from typing import Any, Dict, List, Optional
from flask import session

from app_pedidos.models.entities import Product, ShopSettings, format_ts
from app_pedidos.repositories.catalog_repository import CategoryRepository, ProductRepository


class Cart:
    """
    Carrito: product_id → {product: snapshot, quantity}.

    El snapshot guarda nombre y precio del producto al momento de agregarlo;
    el pedido se construye con esos valores.
    """

    def __init__(self, lines: Optional[Dict[str, Dict[str, Any]]] = None):
        self.lines: Dict[str, Dict[str, Any]] = {}
        for product_id, line in (lines or {}).items():
            quantity = int(line.get('quantity', 0) or 0)
            if quantity > 0 and isinstance(line.get('product'), dict):
                self.lines[product_id] = {'product': dict(line['product']), 'quantity': quantity}

    @staticmethod
    def snapshot(product: Product, category_name: str = '') -> Dict[str, Any]:
        """Copia de los datos del producto que necesita el carrito."""
        return {
            'id': product.id,
            'name': product.name,
            'price': product.price,
            'image_url': product.image_url,
            'category': category_name,
        }

    def add(self, product: Product, category_name: str = '') -> int:
        """
        Agrega una unidad del producto.

        Returns:
            Cantidad resultante de la línea
        """
        line = self.lines.get(product.id)
        if line:
            line['quantity'] += 1
        else:
            line = {'product': self.snapshot(product, category_name), 'quantity': 1}
            self.lines[product.id] = line
        return line['quantity']

    def remove(self, product_id: str) -> bool:
        return self.lines.pop(product_id, None) is not None

    def set_quantity(self, product_id: str, quantity: int) -> bool:
        """
        Fija la cantidad de una línea; cantidad <= 0 la elimina.

        Returns:
            False si la línea no existe
        """
        if product_id not in self.lines:
            return False
        if quantity <= 0:
            del self.lines[product_id]
        else:
            self.lines[product_id]['quantity'] = quantity
        return True

    def clear(self) -> None:
        self.lines = {}

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def total_items(self) -> int:
        return sum(line['quantity'] for line in self.lines.values())

    @property
    def total_price(self) -> int:
        return sum(
            line['quantity'] * int(line['product'].get('price', 0))
            for line in self.lines.values()
        )

    def items(self) -> List[Dict[str, Any]]:
        """Líneas para mostrar (con subtotal)."""
        return [
            {
                'product_id': product_id,
                'name': line['product'].get('name', ''),
                'unit_price': int(line['product'].get('price', 0)),
                'image_url': line['product'].get('image_url', ''),
                'quantity': line['quantity'],
                'subtotal': line['quantity'] * int(line['product'].get('price', 0)),
            }
            for product_id, line in self.lines.items()
        ]

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {pid: {'product': dict(l['product']), 'quantity': l['quantity']}
                for pid, l in self.lines.items()}

    def summary(self) -> Dict[str, Any]:
        return {
            'items': self.items(),
            'total_items': self.total_items,
            'total_price': self.total_price,
        }


class CartService:
    """
    Servicio para el carrito de la sesión.

    Responsabilidades:
    - Cargar y guardar el carrito en session['carrito']
    - Vaciarlo cuando la tienda está cerrada
    - Rechazar agregados con la tienda cerrada o productos inexistentes
    """

    SESSION_KEY = 'carrito'
    # Turno (shift_start_at) en el que se armó el carrito
    SHIFT_KEY = 'carrito_turno'

    def __init__(self, product_repo: ProductRepository, category_repo: CategoryRepository):
        """
        Inicializa el servicio de carrito.

        Args:
            product_repo: Repositorio de productos
            category_repo: Repositorio de categorías
        """
        self.product_repo = product_repo
        self.category_repo = category_repo

    def load(self, settings: Optional[ShopSettings] = None) -> Cart:
        """
        Carrito de la sesión.

        Con settings, un carrito armado en otro turno se descarta: la
        tienda cerró desde entonces aunque el cliente no lo haya visto.
        """
        if settings is not None and self.SESSION_KEY in session:
            if session.get(self.SHIFT_KEY) != format_ts(settings.shift_start_at):
                session.pop(self.SESSION_KEY, None)
                session.pop(self.SHIFT_KEY, None)
                return Cart()
        return Cart(session.get(self.SESSION_KEY, {}))

    def save(self, cart: Cart, settings: Optional[ShopSettings] = None) -> None:
        session[self.SESSION_KEY] = cart.to_dict()
        if settings is not None:
            session[self.SHIFT_KEY] = format_ts(settings.shift_start_at)
        session.modified = True

    def _closed_cart(self) -> Cart:
        """La tienda cerrada siempre deja el carrito vacío."""
        cart = self.load()
        if not cart.is_empty:
            cart.clear()
            self.save(cart)
        return cart

    def get_cart(self, settings: ShopSettings) -> Dict[str, Any]:
        """
        Obtiene el carrito con totales.

        Args:
            settings: Estado de la tienda

        Returns:
            Dict con items, total_items, total_price e is_open
        """
        cart = self.load(settings) if settings.is_open else self._closed_cart()
        result = cart.summary()
        result['is_open'] = settings.is_open
        return result

    def add_item(self, product_id: str, settings: ShopSettings) -> Dict[str, Any]:
        """
        Agrega una unidad de un producto al carrito.

        Args:
            product_id: ID del producto
            settings: Estado de la tienda

        Returns:
            Dict con resultado (ok, error, cart)
        """
        if not settings.is_open:
            self._closed_cart()
            return {'ok': False, 'error': 'La tienda está cerrada. No se reciben pedidos.'}

        data = self.product_repo.get_by_id(product_id) if product_id else None
        if not data:
            return {'ok': False, 'error': 'Producto no encontrado'}

        product = Product.from_dict(product_id, data)
        category = self.category_repo.get_by_id(product.category_id) or {}

        cart = self.load(settings)
        quantity = cart.add(product, category.get('name', ''))
        self.save(cart, settings)
        return {
            'ok': True,
            'message': f"{product.name} agregado al carrito",
            'quantity': quantity,
            'cart': cart.summary(),
        }

    def remove_item(self, product_id: str, settings: ShopSettings) -> Dict[str, Any]:
        if not settings.is_open:
            self._closed_cart()
            return {'ok': False, 'error': 'La tienda está cerrada. No se reciben pedidos.'}
        cart = self.load(settings)
        if not cart.remove(product_id):
            return {'ok': False, 'error': 'El producto no está en el carrito'}
        self.save(cart, settings)
        return {'ok': True, 'cart': cart.summary()}

    def update_quantity(self, product_id: str, quantity: Any, settings: ShopSettings) -> Dict[str, Any]:
        """
        Cambia la cantidad de una línea (<= 0 elimina la línea).

        Returns:
            Dict con resultado (ok, error, cart)
        """
        if not settings.is_open:
            self._closed_cart()
            return {'ok': False, 'error': 'La tienda está cerrada. No se reciben pedidos.'}
        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            return {'ok': False, 'error': 'Cantidad inválida'}
        cart = self.load(settings)
        if not cart.set_quantity(product_id, quantity):
            return {'ok': False, 'error': 'El producto no está en el carrito'}
        self.save(cart, settings)
        return {'ok': True, 'cart': cart.summary()}

    def clear(self) -> None:
        cart = self.load(settings)
        cart.clear()
        self.save(cart, settings)
