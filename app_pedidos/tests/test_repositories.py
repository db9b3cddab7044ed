import json

from app_pedidos.models.entities import parse_ts
from app_pedidos.repositories import (
    IAuditRepository, ICollectionRepository, IOrderRepository, ISettingsRepository,
    OrderRepository, SettingsRepository,
)
from app_pedidos.repositories.base import SERVER_TIMESTAMP


def test_subscribe_delivers_initial_snapshot_and_updates(tmp_path):
    repo = OrderRepository(str(tmp_path))
    received = []
    unsubscribe = repo.subscribe(received.append)
    assert received == [[]]

    doc_id = repo.add({'status': 'PENDIENTE_PAGO'})
    assert len(received) == 2
    assert received[-1] == [(doc_id, {'status': 'PENDIENTE_PAGO'})]

    unsubscribe()
    repo.update(doc_id, {'status': 'EN_PREPARACION'})
    assert len(received) == 2


def test_failing_listener_does_not_block_writes(tmp_path, capsys):
    repo = OrderRepository(str(tmp_path))
    seen = []

    def broken(_snapshot):
        if seen:
            raise RuntimeError('listener roto')
        seen.append(True)

    repo.subscribe(broken)
    doc_id = repo.add({'status': 'PENDIENTE_PAGO'})
    assert repo.exists(doc_id)
    assert '[ADVERTENCIA]' in capsys.readouterr().out


def test_create_order_resolves_server_timestamp(tmp_path):
    repo = OrderRepository(str(tmp_path))
    order_id = repo.create_order({'customer_id': 'c1', 'status': 'PENDIENTE_PAGO'})
    stored = repo.get_by_id(order_id)
    assert parse_ts(stored['order_date']) is not None
    assert len(order_id) == 20

    with open(tmp_path / 'orders.json', encoding='utf-8') as f:
        on_disk = json.load(f)
    assert on_disk[order_id]['order_date'] == stored['order_date']


def test_update_missing_document_returns_false(tmp_path):
    repo = OrderRepository(str(tmp_path))
    assert repo.update_status('no-existe', {'status': 'COMPLETADO'}) is False
    assert repo.delete('no-existe') is None


def test_set_with_merge_keeps_other_fields(tmp_path):
    repo = SettingsRepository(str(tmp_path))
    assert repo.get_shop() == {}
    repo.save_shop({'is_open': True, 'shift_start_at': SERVER_TIMESTAMP})
    repo.save_shop({'is_open': False})
    shop = repo.get_shop()
    assert shop['is_open'] is False
    assert parse_ts(shop['shift_start_at']) is not None


def test_corrupt_file_reads_as_empty(tmp_path):
    repo = OrderRepository(str(tmp_path))
    (tmp_path / 'orders.json').write_text('{no es json', encoding='utf-8')
    assert repo.get_all() == {}


def test_replace_all_notifies_once(tmp_path):
    repo = OrderRepository(str(tmp_path))
    repo.add({'status': 'PENDIENTE_PAGO'})
    snapshots = []
    repo.subscribe(snapshots.append)
    repo.replace_all({'a': {'status': 'COMPLETADO'}, 'b': {'status': 'CANCELADO'}})
    assert len(snapshots) == 2
    assert dict(snapshots[-1]) == {'a': {'status': 'COMPLETADO'}, 'b': {'status': 'CANCELADO'}}


def test_json_repositories_fulfil_interfaces(container):
    assert isinstance(container.order_repo, IOrderRepository)
    assert isinstance(container.product_repo, ICollectionRepository)
    assert isinstance(container.settings_repo, ISettingsRepository)
    assert isinstance(container.audit_repo, IAuditRepository)
    assert not isinstance(container.audit_repo, IOrderRepository)
