# ==============================================================================
# REPOSITORIO DE ITEMS
# ==============================================================================
# Encapsula todo el acceso a la clave pos-items.
# Formato: [{"id", "name", "price", "category", "unit", "index"}, ...]
# ==============================================================================

from typing import List, Optional

from pos_system.models import Item
from pos_system.repositories.base import ListRepository


class ItemRepository(ListRepository):
    """Repositorio para los items del catálogo."""

    KEY = 'pos-items'

    def __init__(self, base_path: str):
        super().__init__(base_path, self.KEY)

    def load(self) -> List[Item]:
        """Carga todos los items en el orden guardado."""
        return [Item.from_dict(i) for i in self.get_all()]

    def save(self, items: List[Item]) -> None:
        """Guarda la colección completa."""
        self.save_all([i.to_dict() for i in items])

    def get_item(self, item_id: str) -> Optional[Item]:
        record = self.find_by('id', item_id)
        return Item.from_dict(record) if record else None

    def uses_category(self, category_name: str) -> bool:
        """Verifica si algún item guardado referencia la categoría."""
        return any(r.get('category') == category_name for r in self.get_all())
