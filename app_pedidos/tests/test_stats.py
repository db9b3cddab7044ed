from datetime import datetime, timedelta, timezone

from app_pedidos.models.entities import Order, OrderItem, OrderStatus, ShopSettings
from app_pedidos.services.stats_service import StatsService

NOW = datetime(2025, 10, 19, 21, 0, tzinfo=timezone.utc)


def order(order_id, status, total, when, items=None):
    return Order(
        id=order_id, customer_id='c', customer_name='Ana', customer_phone='1', customer_address='x',
        items=items or [], total_amount=total, status=OrderStatus(status), order_date=when,
    )


def item(pid, name, qty, price):
    return OrderItem(product_id=pid, product_name=name, quantity=qty, unit_price=price)


ORDERS = [
    order('a', 'COMPLETADO', 16000, NOW - timedelta(hours=1), [item('p1', 'Perro Sencillo', 2, 8000)]),
    order('b', 'COMPLETADO', 15000, NOW - timedelta(days=2), [item('p2', 'Hamburguesa', 1, 15000)]),
    order('c', 'PENDIENTE_PAGO', 8000, NOW - timedelta(minutes=10), [item('p1', 'Perro Sencillo', 1, 8000)]),
    order('d', 'EN_PREPARACION', 13000, NOW - timedelta(minutes=20)),
    order('e', 'CANCELADO', 50000, NOW - timedelta(minutes=30)),
    order('f', 'COMPLETADO', 10000, NOW - timedelta(days=20), [item('p1', 'Perro Sencillo', 1, 8000)]),
]


def test_only_completed_orders_count_as_revenue():
    stats = StatsService().compute(ShopSettings(), NOW, ORDERS)
    assert stats['total_revenue'] == 41000
    assert stats['completed_orders'] == 3
    assert stats['avg_ticket'] == 41000 // 3
    assert stats['today_revenue'] == 16000
    assert stats['today_orders'] == 1
    assert stats['active_orders'] == 2
    assert stats['formatted']['total_revenue'] == '$ 41.000'


def test_shift_revenue_requires_active_shift():
    shift = ShopSettings(is_open=True, shift_start_at=NOW - timedelta(hours=3))
    assert StatsService().compute(shift, NOW, ORDERS)['shift_revenue'] == 16000

    closed = ShopSettings(is_open=False, shift_start_at=NOW - timedelta(hours=3))
    stats = StatsService().compute(closed, NOW, ORDERS)
    assert stats['shift_revenue'] == 0
    assert stats['has_active_shift'] is False


def test_top_products_by_units():
    top = StatsService().compute(ShopSettings(), NOW, ORDERS)['top_products']
    assert top[0] == {'product_id': 'p1', 'name': 'Perro Sencillo', 'units': 3, 'revenue': 24000}
    assert top[1]['product_id'] == 'p2'
    assert len(top) == 2


def test_recent_sales_covers_seven_days():
    sales = StatsService().compute(ShopSettings(), NOW, ORDERS)['recent_sales']
    assert len(sales) == 7
    assert sales[-1] == {'date': '2025-10-19', 'label': '19 oct', 'revenue': 16000}
    assert sales[-3]['revenue'] == 15000
    assert sales[0]['label'] == '13 oct'
    assert sum(day['revenue'] for day in sales) == 31000


def test_recent_orders_newest_first():
    recent = StatsService().compute(ShopSettings(), NOW, ORDERS)['recent_orders']
    assert [o['id'] for o in recent] == ['c', 'd', 'e', 'a', 'b']


def test_empty_store():
    stats = StatsService(lambda: []).compute(ShopSettings(), NOW)
    assert stats['avg_ticket'] == 0
    assert stats['top_products'] == []
    assert all(day['revenue'] == 0 for day in stats['recent_sales'])
