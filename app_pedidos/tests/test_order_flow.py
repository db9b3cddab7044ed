from datetime import datetime, timezone

import pytest

from app_pedidos.models.entities import OrderStatus
from app_pedidos.services import order_flow


def test_next_and_prev_follow_linear_flow():
    assert order_flow.next_status('PENDIENTE_PAGO') == OrderStatus.EN_PREPARACION
    assert order_flow.next_status(OrderStatus.EN_PREPARACION) == OrderStatus.LISTO_REPARTO
    assert order_flow.next_status('LISTO_REPARTO') == OrderStatus.COMPLETADO
    assert order_flow.next_status('COMPLETADO') is None

    assert order_flow.prev_status('PENDIENTE_PAGO') is None
    assert order_flow.prev_status('EN_PREPARACION') == OrderStatus.PENDIENTE_PAGO
    assert order_flow.prev_status('COMPLETADO') == OrderStatus.LISTO_REPARTO


def test_cancelled_has_no_transitions():
    assert order_flow.next_status('CANCELADO') is None
    assert order_flow.prev_status('CANCELADO') is None
    assert order_flow.allowed_targets('CANCELADO') == []


def test_allowed_targets_and_unknown_status():
    assert order_flow.allowed_targets('EN_PREPARACION') == [
        OrderStatus.LISTO_REPARTO, OrderStatus.PENDIENTE_PAGO
    ]
    assert order_flow.allowed_targets('COMPLETADO') == [OrderStatus.LISTO_REPARTO]
    assert order_flow.allowed_targets('ENTREGADO') == []
    assert order_flow.coerce_status('ENTREGADO') is None


def test_terminal_and_active():
    assert order_flow.is_terminal('COMPLETADO')
    assert order_flow.is_terminal('CANCELADO')
    assert not order_flow.is_terminal('LISTO_REPARTO')
    assert order_flow.is_active('PENDIENTE_PAGO')
    assert not order_flow.is_active('CANCELADO')
    assert not order_flow.is_active('desconocido')


def test_build_status_update_stamps_transition_field():
    now = datetime(2025, 10, 19, 22, 0, tzinfo=timezone.utc)
    assert order_flow.build_status_update('EN_PREPARACION', now) == {
        'status': 'EN_PREPARACION', 'confirmed_at': now.isoformat()
    }
    assert order_flow.build_status_update('LISTO_REPARTO', now)['ready_at'] == now.isoformat()
    assert order_flow.build_status_update('COMPLETADO', now)['completed_at'] == now.isoformat()
    # Volver a pendiente no sella ningún campo
    assert order_flow.build_status_update('PENDIENTE_PAGO', now) == {'status': 'PENDIENTE_PAGO'}


def test_build_status_update_rejects_unknown_status():
    with pytest.raises(ValueError):
        order_flow.build_status_update('ENTREGADO')


def test_labels():
    assert order_flow.action_label('PENDIENTE_PAGO') == 'Confirmar Pago'
    assert order_flow.action_label('EN_PREPARACION') == 'Pedido Listo'
    assert order_flow.action_label('LISTO_REPARTO') == 'Completar Pedido'
    assert order_flow.action_label('COMPLETADO') is None
    assert order_flow.status_label('LISTO_REPARTO') == 'Listo para Reparto'
    assert OrderStatus.CANCELADO not in order_flow.KANBAN_COLUMNS
