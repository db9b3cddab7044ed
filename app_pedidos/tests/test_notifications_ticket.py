from datetime import datetime, timezone

from app_pedidos.models.entities import Order, OrderItem, OrderStatus, PaymentMethod
from app_pedidos.services.notification_service import NotificationService
from app_pedidos.services.ticket_service import TICKET_WIDTH, render_ticket


def make_order(order_id='abcde12345', status='PENDIENTE_PAGO', notes=''):
    return Order(
        id=order_id, customer_id='c1', customer_name='Ana', customer_phone='3001234567',
        customer_address='Calle 10 # 5-20',
        items=[OrderItem('p1', 'Perro Sencillo', 2, 8000)],
        total_amount=16000, payment_method=PaymentMethod.EFECTIVO,
        status=OrderStatus(status), order_date=datetime(2025, 10, 19, 22, 0, tzinfo=timezone.utc),
        notes=notes,
    )


# =============================================================================
# NOTIFICACIONES
# =============================================================================

def test_each_order_is_notified_once_per_session():
    service = NotificationService()
    orders = [make_order('aaaaa1'), make_order('bbbbb2', status='COMPLETADO')]

    first = service.poll(orders, 'sesion-1', permission_granted=True)
    assert first['pending_count'] == 1
    assert first['notifications'] == [{
        'order_id': 'aaaaa1', 'title': 'Nuevo pedido #aaaaa',
        'body': 'Ana - $ 16.000', 'play_sound': True,
    }]
    assert service.poll(orders, 'sesion-1', True)['notifications'] == []
    # Otra sesión recibe su propia notificación
    assert len(service.poll(orders, 'sesion-2', True)['notifications']) == 1


def test_without_permission_nothing_is_marked():
    service = NotificationService()
    orders = [make_order('aaaaa1')]
    result = service.poll(orders, 'sesion-1', permission_granted=False)
    assert result['requires_permission'] is True
    assert result['pending_count'] == 1
    assert result['notifications'] == []
    assert len(service.poll(orders, 'sesion-1', True)['notifications']) == 1


def test_forget_resets_session():
    service = NotificationService()
    orders = [make_order('aaaaa1')]
    service.poll(orders, 'sesion-1', True)
    service.forget('sesion-1')
    assert len(service.poll(orders, 'sesion-1', True)['notifications']) == 1


# =============================================================================
# TICKET
# =============================================================================

def test_ticket_layout():
    text = render_ticket(make_order(), shop_name='La Perrada de William')
    lines = text.splitlines()
    assert lines[0].strip() == 'LA PERRADA DE WILLIAM'
    assert lines[1].strip() == 'TICKET DE COCINA'
    assert lines[2] == 'Pedido: #abcde'
    assert 'CLIENTE:' in lines
    assert 'Ana' in lines and 'Calle 10 # 5-20' in lines and '3001234567' in lines

    item_line = next(line for line in lines if line.startswith('2x Perro Sencillo'))
    assert item_line.endswith('$ 8.000')
    assert len(item_line) == TICKET_WIDTH
    assert lines[-2].strip() == 'TOTAL: $ 16.000'
    assert lines[-1].strip() == 'Método: EFECTIVO'
    assert 'NOTA:' not in lines


def test_ticket_includes_notes():
    lines = render_ticket(make_order(notes='Sin cebolla'), shop_name='X').splitlines()
    index = lines.index('NOTA:')
    assert lines[index + 1] == 'Sin cebolla'
