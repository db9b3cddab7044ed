# ==============================================================================
# REPOSITORIO DE PEDIDOS
# ==============================================================================
# Encapsula el acceso a orders.json. Los pedidos se insertan una vez en el
# checkout y después solo se actualiza su estado; nunca se eliminan.
# ==============================================================================

import os
from typing import Any, Dict
from .base import CollectionRepository, SERVER_TIMESTAMP


class OrderRepository(CollectionRepository):
    """
    Colección de pedidos.

    Formato de datos en orders.json:
    {
        "a1b2c3d4e5...": {
            "customer_id": "...",
            "customer_name": "Ana",
            "items": [{"product_id": "...", "product_name": "...",
                       "quantity": 2, "unit_price": 8000}],
            "total_amount": 16000,
            "payment_method": "EFECTIVO",
            "status": "PENDIENTE_PAGO",
            "order_date": "2025-10-19T22:15:03.120000+00:00"
        }
    }
    """

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, 'orders.json'))

    def create_order(self, fields: Dict[str, Any]) -> str:
        """
        Inserta un pedido; order_date lo asigna el almacén.

        Args:
            fields: Campos del pedido (sin order_date)

        Returns:
            ID del pedido creado
        """
        data = dict(fields)
        data['order_date'] = SERVER_TIMESTAMP
        return self.add(data)

    def update_status(self, order_id: str, update: Dict[str, Any]) -> bool:
        """
        Escribe un cambio de estado (status + timestamp de la transición).
        No verifica el estado previo: la última escritura gana.
        """
        return self.update(order_id, update)
