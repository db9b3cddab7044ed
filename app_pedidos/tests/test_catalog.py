from app_pedidos import config


def by_name(products, name):
    return next(p for p in products if p['name'] == name)


def test_reset_catalog_loads_seed(container, seeded):
    assert len(seeded) == 8
    assert len(container.catalog_service.list_categories()) == 4
    perro = by_name(seeded, 'Perro Sencillo')
    assert perro['price'] == 8000
    assert perro['category'] == 'Perros Calientes'


def test_reset_requires_confirmation(container):
    result = container.catalog_service.reset_catalog(confirm=False)
    assert not result['ok']
    assert container.product_repo.get_all() == {}


def test_reset_replaces_existing_catalog(container, seeded):
    service = container.catalog_service
    category = service.create_category('Postres')['category']
    service.save_product({'name': 'Brownie', 'description': 'Brownie de chocolate con helado',
                          'price': 7000, 'category_id': category['id']})

    result = service.reset_catalog(confirm=True, user='admin:1')
    assert result == {'ok': True, 'message': 'Menú restablecido.', 'categories': 4, 'products': 8}
    names = {c.name for c in service.list_categories()}
    assert 'Postres' not in names
    category_ids = set(container.category_repo.get_all())
    assert all(p['category_id'] in category_ids for p in service.list_products())


def test_missing_seed_file_is_reported(container, tmp_path):
    from app_pedidos.services.catalog_service import CatalogService
    service = CatalogService(container.product_repo, container.category_repo,
                             container.audit_service, seed_file=str(tmp_path / 'no-existe.json'))
    result = service.reset_catalog(confirm=True)
    assert not result['ok']


def test_product_validation_errors_by_field(container, seeded):
    result = container.catalog_service.save_product({
        'name': 'Ab', 'description': 'corta', 'price': '12.5', 'category_id': 'nada'
    })
    assert not result['ok']
    assert set(result['errors']) == {'name', 'description', 'price', 'category_id'}
    assert len(container.product_repo.get_all()) == 8


def test_negative_price_is_rejected(container, seeded):
    category_id = seeded[0]['category_id']
    result = container.catalog_service.save_product({
        'name': 'Combo', 'description': 'Combo familiar de la casa', 'price': -1, 'category_id': category_id
    })
    assert result['errors'] == {'price': 'El precio no puede ser negativo.'}


def test_non_finite_price_is_a_field_error(container, seeded):
    category_id = seeded[0]['category_id']
    for price in ('inf', '-inf', float('inf'), 'nan'):
        result = container.catalog_service.save_product({
            'name': 'Combo', 'description': 'Combo familiar de la casa', 'price': price,
            'category_id': category_id
        })
        assert result['errors'] == {'price': 'El precio debe ser un número entero.'}


def test_create_product_uses_placeholder_image(container, seeded):
    category_id = seeded[0]['category_id']
    result = container.catalog_service.save_product({
        'name': 'Salchipapa', 'description': 'Papas con salchicha y salsas',
        'price': '9000', 'category_id': category_id
    }, user='admin:1')
    assert result['ok']
    product = result['product']
    assert product['price'] == 9000
    assert product['image_url'] == config.PLACEHOLDER_IMAGE_URL


def test_update_keeps_existing_image(container, seeded):
    perro = by_name(seeded, 'Perro Sencillo')
    result = container.catalog_service.save_product({
        'name': 'Perro Sencillo', 'description': perro['description'],
        'price': 9000, 'category_id': perro['category_id']
    }, product_id=perro['id'])
    assert result['ok']
    assert result['product']['price'] == 9000
    assert result['product']['image_url'] == perro['image_url']


def test_update_missing_product(container, seeded):
    result = container.catalog_service.save_product({}, product_id='no-existe')
    assert result == {'ok': False, 'error': 'Producto no encontrado'}


def test_category_in_use_cannot_be_deleted(container, seeded):
    service = container.catalog_service
    perro = by_name(seeded, 'Perro Sencillo')
    result = service.delete_category(perro['category_id'])
    assert not result['ok']
    assert result['in_use'] == 3

    empty = service.create_category('Postres')['category']
    assert service.delete_category(empty['id'])['ok']
    assert service.get_category(empty['id']) is None


def test_category_names_are_unique(container, seeded):
    service = container.catalog_service
    assert service.create_category('bebidas')['errors'] == {'name': 'Ya existe una categoría con ese nombre.'}
    bebidas = service.list_categories()[0]
    assert service.rename_category(bebidas.id, bebidas.name)['ok']


def test_list_products_by_category(container, seeded):
    perro = by_name(seeded, 'Perro Sencillo')
    products = container.catalog_service.list_products(perro['category_id'])
    assert {p['name'] for p in products} == {'Perro Sencillo', 'Perro Especial', 'Perro Suizo'}


def test_delete_product(container, seeded):
    product_id = seeded[0]['id']
    assert container.catalog_service.delete_product(product_id)['ok']
    assert container.catalog_service.delete_product(product_id)['error'] == 'Producto no encontrado'
