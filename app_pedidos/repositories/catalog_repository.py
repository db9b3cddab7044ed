# ==============================================================================
# REPOSITORIOS DEL CATÁLOGO
# ==============================================================================
# Encapsula el acceso a products.json y categories.json
# ==============================================================================

import os
from typing import Dict, List, Optional
from .base import CollectionRepository


class CategoryRepository(CollectionRepository):
    """
    Colección de categorías del menú.

    Formato de datos en categories.json:
    {
        "c1a2b3...": {"name": "Perros Calientes"}
    }
    """

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'categories.json'))

    def find_by_name(self, name: str) -> Optional[str]:
        """
        Busca una categoría por nombre (sin distinguir mayúsculas).

        Returns:
            ID de la categoría o None
        """
        wanted = (name or '').strip().lower()
        for doc_id, data in self.get_all().items():
            if (data.get('name') or '').strip().lower() == wanted:
                return doc_id
        return None

    def names_by_id(self) -> Dict[str, str]:
        return {doc_id: data.get('name', '') for doc_id, data in self.get_all().items()}


class ProductRepository(CollectionRepository):
    """
    Colección de productos.

    Formato de datos en products.json:
    {
        "p9f8e7...": {
            "name": "Perro Sencillo",
            "description": "Salchicha americana, papitas y salsas",
            "price": 8000,
            "category_id": "c1a2b3...",
            "image_url": "https://...",
            "image_hint": "hot dog"
        }
    }
    """

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'products.json'))

    def find_by_category(self, category_id: str) -> List[str]:
        """IDs de los productos que referencian una categoría."""
        return [
            doc_id for doc_id, data in self.get_all().items()
            if data.get('category_id') == category_id
        ]

    def count_by_category(self, category_id: str) -> int:
        return len(self.find_by_category(category_id))
