from datetime import datetime, timezone

from flask import session

from app_pedidos.main import app
from app_pedidos.models.entities import Product, ShopSettings
from app_pedidos.services.cart_service import Cart

OPEN = ShopSettings(is_open=True)
CLOSED = ShopSettings(is_open=False)


def perro():
    return Product(id='p1', name='Perro Sencillo', price=8000, category_id='c1')


def test_cart_add_increments_quantity():
    cart = Cart()
    assert cart.add(perro(), 'Perros') == 1
    assert cart.add(perro(), 'Perros') == 2
    assert cart.total_items == 2
    assert cart.total_price == 16000
    assert cart.items()[0]['subtotal'] == 16000


def test_set_quantity_zero_removes_line():
    cart = Cart()
    cart.add(perro())
    assert cart.set_quantity('p1', 3)
    assert cart.total_items == 3
    assert cart.set_quantity('p1', 0)
    assert cart.is_empty
    assert not cart.set_quantity('p1', 1)


def test_snapshot_freezes_price():
    cart = Cart()
    product = perro()
    cart.add(product)
    product.price = 99999
    assert cart.total_price == 8000


def test_cart_ignores_invalid_session_lines():
    cart = Cart({'p1': {'product': {'id': 'p1', 'price': 8000}, 'quantity': 0},
                 'p2': {'product': 'basura', 'quantity': 2}})
    assert cart.is_empty


def test_service_add_and_update(container, seeded):
    product = seeded[0]
    with app.test_request_context():
        service = container.cart_service
        result = service.add_item(product['id'], OPEN)
        assert result['ok']
        assert result['quantity'] == 1
        service.add_item(product['id'], OPEN)
        cart = service.get_cart(OPEN)
        assert cart['total_items'] == 2
        assert cart['total_price'] == 2 * product['price']
        assert cart['is_open'] is True

        assert service.update_quantity(product['id'], '5', OPEN)['cart']['total_items'] == 5
        assert service.update_quantity(product['id'], 'muchos', OPEN)['error'] == 'Cantidad inválida'
        assert service.remove_item(product['id'], OPEN)['ok']
        assert not service.remove_item(product['id'], OPEN)['ok']


def test_service_rejects_unknown_product(container, seeded):
    with app.test_request_context():
        result = container.cart_service.add_item('no-existe', OPEN)
        assert result == {'ok': False, 'error': 'Producto no encontrado'}


def test_closed_shop_empties_cart(container, seeded):
    product = seeded[0]
    with app.test_request_context():
        service = container.cart_service
        service.add_item(product['id'], OPEN)
        assert session['carrito']

        rejected = service.add_item(product['id'], CLOSED)
        assert not rejected['ok']
        assert 'cerrada' in rejected['error']

        cart = service.get_cart(CLOSED)
        assert cart['items'] == []
        assert cart['is_open'] is False
        assert session['carrito'] == {}


def test_totals_follow_mixed_operations():
    cart = Cart()
    suizo = Product(id='p2', name='Perro Suizo', price=15000, category_id='c1')
    gaseosa = Product(id='p3', name='Gaseosa', price=4000, category_id='c2')

    cart.add(perro())
    cart.add(suizo)
    cart.add(gaseosa)
    cart.add(perro())
    cart.set_quantity('p2', 4)
    cart.remove('p3')
    cart.set_quantity('p2', 1)

    assert cart.total_items == 3
    assert cart.total_price == 8000 * 2 + 15000 == 31000
    assert cart.total_price == sum(line['quantity'] * line['unit_price'] for line in cart.items())


def test_cart_from_previous_shift_is_dropped(container, seeded):
    product = seeded[0]
    shop = container.shop_service
    with app.test_request_context():
        service = container.cart_service
        shop.set_open(True, now=datetime(2025, 10, 19, 18, 0, tzinfo=timezone.utc))
        first_shift = shop.get_settings()
        service.add_item(product['id'], first_shift)
        assert service.get_cart(first_shift)['total_items'] == 1

        # El cliente no hace ninguna petición mientras la tienda está cerrada
        shop.set_open(False)
        shop.set_open(True, now=datetime(2025, 10, 20, 18, 0, tzinfo=timezone.utc))
        second_shift = shop.get_settings()

        cart = service.get_cart(second_shift)
        assert cart['items'] == []
        assert cart['total_items'] == 0
        assert service.add_item(product['id'], second_shift)['quantity'] == 1
