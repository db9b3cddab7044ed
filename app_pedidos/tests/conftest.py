from datetime import datetime, timezone

import pytest

from app_pedidos import performance_logger
from app_pedidos.app_container import AppContainer, get_container
from app_pedidos.main import app
from app_pedidos.models.entities import format_ts


@pytest.fixture(autouse=True)
def isolated_container(tmp_path):
    """Cada test usa su propio directorio de datos y sin logs de profiling."""
    performance_logger.configure(enabled=False, logs_dir=str(tmp_path / 'logs'))
    AppContainer.reset_instance()
    c = get_container(str(tmp_path / 'data'), persist_status_writes=True)
    yield c
    AppContainer.reset_instance()


@pytest.fixture
def container(isolated_container):
    return isolated_container


@pytest.fixture
def client():
    app.config['TESTING'] = True
    with app.test_client() as c:
        yield c


@pytest.fixture
def seeded(container):
    """Catálogo cargado desde el fixture del menú."""
    result = container.catalog_service.reset_catalog(confirm=True)
    assert result['ok']
    return container.catalog_service.list_products()


@pytest.fixture
def open_shop(container):
    container.shop_service.set_open(True)
    return container.shop_service.get_settings()


@pytest.fixture
def order_factory(container):
    """Inserta pedidos con fecha y estado controlados."""
    def make(status='PENDIENTE_PAGO', order_date=None, total=16000, items=None, name='Ana', notes=''):
        order_date = order_date or datetime.now(timezone.utc)
        items = items if items is not None else [
            {'product_id': 'p1', 'product_name': 'Perro Sencillo', 'quantity': 2, 'unit_price': 8000}
        ]
        doc_id = container.order_repo.new_id()
        fields = {
            'customer_id': 'c1',
            'customer_name': name,
            'customer_phone': '3001234567',
            'customer_address': 'Calle 10 # 5-20',
            'items': items,
            'total_amount': total,
            'payment_method': 'EFECTIVO',
            'status': status,
            'order_date': format_ts(order_date),
        }
        if notes:
            fields['notes'] = notes
        container.order_repo.set(doc_id, fields)
        return doc_id
    return make


def get_csrf(client):
    r = client.get('/api/csrf')
    assert r.status_code == 200
    return r.get_json()['csrf_token']


def login_admin(client):
    token = get_csrf(client)
    r = client.post('/api/admin/login', json={'csrf_token': token})
    assert r.status_code == 200
    assert r.get_json()['ok']
    return token


@pytest.fixture
def csrf_token(client):
    return get_csrf(client)


@pytest.fixture
def admin_token(client):
    return login_admin(client)

