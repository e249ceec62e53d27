# ==============================================================================
# REPOSITORIO DE VENTAS
# ==============================================================================
# Encapsula todo el acceso a la clave pos-sales.
# Las ventas se almacenan como lista en orden de creación:
# [
#     {
#         "id": "1718000000000",
#         "customerName": "Walk-in Customer",
#         "items": [{..., "quantity": 2, "total": 5.0}],
#         "total": 5.0,
#         "date": "2024-06-10T06:13:20.000Z"
#     }
# ]
# ==============================================================================

from typing import List, Optional

from pos_system.models import Sale
from pos_system.repositories.base import ListRepository


class SalesRepository(ListRepository):
    """Repositorio para gestión de ventas."""

    KEY = 'pos-sales'

    def __init__(self, base_path: str):
        super().__init__(base_path, self.KEY)

    def load(self) -> List[Sale]:
        return [Sale.from_dict(s) for s in self.get_all()]

    def save(self, sales: List[Sale]) -> None:
        self.save_all([s.to_dict() for s in sales])

    def get_sale(self, sale_id: str) -> Optional[Sale]:
        record = self.find_by('id', sale_id)
        return Sale.from_dict(record) if record else None

    def create_sale(self, sale: Sale) -> str:
        """
        Agrega una venta nueva al final.

        Returns:
            Id de la venta
        """
        self.append(sale.to_dict())
        return sale.id

    def update_sale(self, sale: Sale) -> bool:
        """
        Reemplaza en su lugar la venta con el mismo id.

        Returns:
            True si existía y se reemplazó
        """
        return self.replace_where('id', sale.id, sale.to_dict())

    def delete_sale(self, sale_id: str) -> Optional[Sale]:
        removed = self.remove_where('id', sale_id)
        return Sale.from_dict(removed) if removed else None
