# ==============================================================================
# SERVICIO DE CATÁLOGO
# ==============================================================================
# CRUD de categorías y productos del menú, más el restablecimiento del
# catálogo desde el fixture data/seed_catalog.json.
#
# Las categorías son una colección propia y los productos las referencian
# por category_id. No se puede borrar una categoría en uso.
# ==============================================================================

import json
from typing import Any, Dict, List, Optional

from app_pedidos import config
from app_pedidos.models.entities import Category, Product
from app_pedidos.performance_logger import profile_function
from app_pedidos.repositories.catalog_repository import CategoryRepository, ProductRepository
from app_pedidos.services.audit_service import AuditService


class CatalogService:
    """
    Servicio para gestión del menú.

    Responsabilidades:
    - Validar formularios de producto y categoría (errores por campo)
    - Mantener la integridad producto → categoría
    - Restablecer el catálogo desde el fixture
    """

    PRODUCT_NAME_MIN = 3
    PRODUCT_DESCRIPTION_MIN = 10
    CATEGORY_NAME_MIN = 2

    def __init__(
        self,
        product_repo: ProductRepository,
        category_repo: CategoryRepository,
        audit_service: AuditService,
        seed_file: str = None
    ):
        """
        Inicializa el servicio de catálogo.

        Args:
            product_repo: Repositorio de productos
            category_repo: Repositorio de categorías
            audit_service: Servicio de auditoría
            seed_file: Ruta del fixture (por defecto config.SEED_CATALOG_FILE)
        """
        self.product_repo = product_repo
        self.category_repo = category_repo
        self.audit_service = audit_service
        self.seed_file = seed_file or config.SEED_CATALOG_FILE

    # =========================================================================
    # CATEGORÍAS
    # =========================================================================

    def list_categories(self) -> List[Category]:
        """Categorías ordenadas por nombre."""
        categories = [Category.from_dict(doc_id, data)
                      for doc_id, data in self.category_repo.list_documents()]
        return sorted(categories, key=lambda c: c.name.lower())

    def get_category(self, category_id: str) -> Optional[Category]:
        data = self.category_repo.get_by_id(category_id)
        return Category.from_dict(category_id, data) if data else None

    def _validate_category_name(self, name: Any, exclude_id: str = None) -> Dict[str, str]:
        name = str(name or '').strip()
        if len(name) < self.CATEGORY_NAME_MIN:
            return {'name': f'El nombre debe tener al menos {self.CATEGORY_NAME_MIN} caracteres.'}
        existing = self.category_repo.find_by_name(name)
        if existing and existing != exclude_id:
            return {'name': 'Ya existe una categoría con ese nombre.'}
        return {}

    def create_category(self, name: Any, user: str = '') -> Dict[str, Any]:
        """
        Crea una categoría.

        Returns:
            Dict con ok y category, u ok=False con errors por campo
        """
        errors = self._validate_category_name(name)
        if errors:
            return {'ok': False, 'error': 'Por favor, corrige los errores del formulario.', 'errors': errors}
        category = Category(id='', name=str(name).strip())
        category.id = self.category_repo.add(category.to_dict())
        self.audit_service.log_catalog_change(user, 'creada', 'Categoría', category.name, category.id)
        return {'ok': True, 'message': 'Categoría guardada con éxito.', 'category': {'id': category.id, 'name': category.name}}

    def rename_category(self, category_id: str, name: Any, user: str = '') -> Dict[str, Any]:
        if not self.category_repo.exists(category_id):
            return {'ok': False, 'error': 'Categoría no encontrada'}
        errors = self._validate_category_name(name, exclude_id=category_id)
        if errors:
            return {'ok': False, 'error': 'Por favor, corrige los errores del formulario.', 'errors': errors}
        new_name = str(name).strip()
        self.category_repo.set(category_id, {'name': new_name}, merge=True)
        self.audit_service.log_catalog_change(user, 'actualizada', 'Categoría', new_name, category_id)
        return {'ok': True, 'message': 'Categoría guardada con éxito.', 'category': {'id': category_id, 'name': new_name}}

    def delete_category(self, category_id: str, user: str = '') -> Dict[str, Any]:
        """
        Elimina una categoría que ningún producto referencia.

        Returns:
            Dict con ok; ok=False con 'in_use' si tiene productos
        """
        category = self.get_category(category_id)
        if category is None:
            return {'ok': False, 'error': 'Categoría no encontrada'}
        in_use = self.product_repo.count_by_category(category_id)
        if in_use:
            return {
                'ok': False,
                'error': f"No se puede eliminar '{category.name}': tiene {in_use} producto(s) asociados.",
                'in_use': in_use,
            }
        self.category_repo.delete(category_id)
        self.audit_service.log_catalog_change(user, 'eliminada', 'Categoría', category.name, category_id)
        return {'ok': True, 'message': 'Categoría eliminada.'}

    # =========================================================================
    # PRODUCTOS
    # =========================================================================

    def list_products(self, category_id: str = None) -> List[Dict[str, Any]]:
        """
        Productos con el nombre de su categoría, ordenados por categoría y nombre.

        Args:
            category_id: Filtrar por categoría (opcional)
        """
        names = self.category_repo.names_by_id()
        products = [Product.from_dict(doc_id, data)
                    for doc_id, data in self.product_repo.list_documents()]
        if category_id:
            products = [p for p in products if p.category_id == category_id]
        products.sort(key=lambda p: (names.get(p.category_id, '').lower(), p.name.lower()))
        return [p.to_public_dict(names.get(p.category_id, '')) for p in products]

    def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        data = self.product_repo.get_by_id(product_id)
        if not data:
            return None
        product = Product.from_dict(product_id, data)
        category = self.category_repo.get_by_id(product.category_id) or {}
        return product.to_public_dict(category.get('name', ''))

    def validate_product(self, form: Dict[str, Any]) -> Dict[str, Any]:
        """
        Valida el formulario de producto.

        Args:
            form: Campos name, description, price, category_id

        Returns:
            {'errors': {campo: mensaje}, 'clean': {campos normalizados}}
        """
        errors: Dict[str, str] = {}
        name = str(form.get('name') or '').strip()
        description = str(form.get('description') or '').strip()
        category_id = str(form.get('category_id') or '').strip()

        if len(name) < self.PRODUCT_NAME_MIN:
            errors['name'] = f'El nombre debe tener al menos {self.PRODUCT_NAME_MIN} caracteres.'
        if len(description) < self.PRODUCT_DESCRIPTION_MIN:
            errors['description'] = f'La descripción debe tener al menos {self.PRODUCT_DESCRIPTION_MIN} caracteres.'

        price = None
        raw_price = form.get('price')
        try:
            price_float = float(raw_price)
            if price_float != int(price_float):
                raise ValueError()
            price = int(price_float)
        except (TypeError, ValueError, OverflowError):
            errors['price'] = 'El precio debe ser un número entero.'
        else:
            if price < 0:
                errors['price'] = 'El precio no puede ser negativo.'

        if not category_id or not self.category_repo.exists(category_id):
            errors['category_id'] = 'Selecciona una categoría válida.'

        return {
            'errors': errors,
            'clean': {
                'name': name,
                'description': description,
                'price': price,
                'category_id': category_id,
                'image_url': str(form.get('image_url') or '').strip(),
                'image_hint': str(form.get('image_hint') or '').strip(),
            },
        }

    def save_product(self, form: Dict[str, Any], product_id: str = None, user: str = '') -> Dict[str, Any]:
        """
        Crea o actualiza un producto.

        Si la validación falla no se hace ninguna escritura.

        Args:
            form: Campos del formulario
            product_id: ID a actualizar (None = crear)
            user: Sesión de administrador (auditoría)

        Returns:
            Dict con ok y product, u ok=False con errors por campo
        """
        if product_id and not self.product_repo.exists(product_id):
            return {'ok': False, 'error': 'Producto no encontrado'}

        validation = self.validate_product(form)
        if validation['errors']:
            return {
                'ok': False,
                'error': 'Por favor, corrige los errores del formulario.',
                'errors': validation['errors'],
            }
        clean = validation['clean']

        if product_id:
            existing = Product.from_dict(product_id, self.product_repo.get_by_id(product_id))
            clean['image_url'] = clean['image_url'] or existing.image_url
            clean['image_hint'] = clean['image_hint'] or existing.image_hint
        else:
            clean['image_url'] = clean['image_url'] or config.PLACEHOLDER_IMAGE_URL
            clean['image_hint'] = clean['image_hint'] or config.PLACEHOLDER_IMAGE_HINT

        product = Product(id=product_id or '', **clean)
        if product_id:
            self.product_repo.set(product_id, product.to_dict())
            action = 'actualizado'
        else:
            product.id = self.product_repo.add(product.to_dict())
            action = 'creado'

        self.audit_service.log_catalog_change(user, action, 'Producto', product.name, product.id)
        return {
            'ok': True,
            'message': 'Producto guardado con éxito.',
            'product': self.get_product(product.id),
        }

    def delete_product(self, product_id: str, user: str = '') -> Dict[str, Any]:
        removed = self.product_repo.delete(product_id)
        if removed is None:
            return {'ok': False, 'error': 'Producto no encontrado'}
        self.audit_service.log_catalog_change(user, 'eliminado', 'Producto', removed.get('name', ''), product_id)
        return {'ok': True, 'message': 'Producto eliminado.'}

    # =========================================================================
    # RESTABLECER MENÚ
    # =========================================================================

    def load_seed(self) -> Dict[str, Any]:
        """
        Lee el fixture del catálogo.

        Raises:
            OSError, ValueError: Si el archivo no existe o no es JSON válido
        """
        with open(self.seed_file, 'r', encoding='utf-8') as f:
            return json.load(f)

    @profile_function(name="Restablecer catálogo")
    def reset_catalog(self, confirm: bool = False, user: str = '') -> Dict[str, Any]:
        """
        Borra todas las categorías y productos y carga el fixture.

        Cada colección se reemplaza en una escritura atómica propia; no hay
        garantía conjunta entre categorías y productos.

        Args:
            confirm: Debe ser True (diálogo de confirmación)
            user: Sesión de administrador (auditoría)

        Returns:
            Dict con ok y conteos
        """
        if not confirm:
            return {'ok': False, 'error': 'Confirma el restablecimiento del menú.'}

        try:
            seed = self.load_seed()
        except (OSError, ValueError) as e:
            print(f"[ERROR] No se pudo leer el catálogo base: {e}")
            return {'ok': False, 'error': 'No se pudo leer el catálogo base.'}

        categories: Dict[str, Dict[str, Any]] = {}
        ids_by_key: Dict[str, str] = {}
        for entry in seed.get('categories', []):
            doc_id = self.category_repo.new_id()
            ids_by_key[entry.get('key') or entry['name']] = doc_id
            categories[doc_id] = Category(id=doc_id, name=entry['name']).to_dict()

        products: Dict[str, Dict[str, Any]] = {}
        for entry in seed.get('products', []):
            category_id = ids_by_key.get(entry.get('category', ''))
            if category_id is None:
                print(f"[ADVERTENCIA] Producto '{entry.get('name')}' con categoría desconocida en el catálogo base")
                continue
            doc_id = self.product_repo.new_id()
            products[doc_id] = Product(
                id=doc_id,
                name=entry['name'],
                description=entry.get('description', ''),
                price=int(entry.get('price', 0)),
                category_id=category_id,
                image_url=entry.get('image_url') or config.PLACEHOLDER_IMAGE_URL,
                image_hint=entry.get('image_hint') or config.PLACEHOLDER_IMAGE_HINT,
            ).to_dict()

        # Productos primero: nunca quedan productos apuntando a categorías borradas
        self.product_repo.replace_all({})
        self.category_repo.replace_all(categories)
        self.product_repo.replace_all(products)

        self.audit_service.log_catalog_reset(user, len(categories), len(products))
        return {
            'ok': True,
            'message': 'Menú restablecido.',
            'categories': len(categories),
            'products': len(products),
        }
