from datetime import datetime, timedelta, timezone

from app_pedidos.models.entities import Order, OrderFilterMode, ShopSettings
from app_pedidos.services.order_filters import filter_orders, parse_mode


NOW = datetime(2025, 10, 19, 20, 0, tzinfo=timezone.utc)


def make_order(order_id, when):
    return Order(id=order_id, customer_id='c', customer_name='Ana', customer_phone='1',
                 customer_address='x', order_date=when)


ORDERS = [
    make_order('turno', NOW - timedelta(hours=1)),
    make_order('manana', NOW - timedelta(hours=12)),
    make_order('ayer', NOW - timedelta(days=1, hours=1)),
    make_order('semana', NOW - timedelta(days=5)),
    make_order('viejo', NOW - timedelta(days=30)),
]


def ids(result):
    return {o.id for o in result.orders}


def test_current_shift_uses_shift_start():
    settings = ShopSettings(is_open=True, shift_start_at=NOW - timedelta(hours=2))
    result = filter_orders(ORDERS, 'current-shift', settings, NOW)
    assert ids(result) == {'turno'}
    assert not result.no_active_shift


def test_current_shift_without_active_shift_is_empty():
    closed = ShopSettings(is_open=False, shift_start_at=NOW - timedelta(hours=2))
    result = filter_orders(ORDERS, OrderFilterMode.CURRENT_SHIFT, closed, NOW)
    assert result.orders == []
    assert result.no_active_shift

    never_opened = ShopSettings(is_open=True, shift_start_at=None)
    result = filter_orders(ORDERS, OrderFilterMode.CURRENT_SHIFT, never_opened, NOW)
    assert result.orders == []
    assert result.no_active_shift


def test_today_starts_at_local_midnight():
    result = filter_orders(ORDERS, 'today', ShopSettings(), NOW)
    assert ids(result) == {'turno', 'manana'}


def test_last_seven_days_and_all():
    assert ids(filter_orders(ORDERS, 'last-7-days', ShopSettings(), NOW)) == {
        'turno', 'manana', 'ayer', 'semana'
    }
    assert len(filter_orders(ORDERS, 'all', ShopSettings(), NOW).orders) == len(ORDERS)


def test_unknown_mode_falls_back_to_current_shift():
    assert parse_mode('mes-pasado') == OrderFilterMode.CURRENT_SHIFT
    assert parse_mode(None) == OrderFilterMode.CURRENT_SHIFT
    result = filter_orders(ORDERS, 'mes-pasado', ShopSettings(), NOW)
    assert result.mode == OrderFilterMode.CURRENT_SHIFT
    assert result.no_active_shift


def test_orders_without_date_only_in_all():
    undated = make_order('sin-fecha', None)
    assert ids(filter_orders([undated], 'today', ShopSettings(), NOW)) == set()
    assert ids(filter_orders([undated], 'all', ShopSettings(), NOW)) == {'sin-fecha'}
