# ==============================================================================
# REPOSITORIO DE CATEGORÍAS
# ==============================================================================
# Encapsula todo el acceso a la clave pos-categories.
# Las categorías se almacenan como lista: [{"id": ..., "name": ...}, ...]
# ==============================================================================

from typing import List, Optional

from pos_system.models import Category
from pos_system.repositories.base import ListRepository


class CategoryRepository(ListRepository):
    """Repositorio para las categorías del catálogo."""

    KEY = 'pos-categories'

    def __init__(self, base_path: str):
        super().__init__(base_path, self.KEY)

    def load(self) -> List[Category]:
        """Carga todas las categorías en el orden guardado."""
        return [Category.from_dict(c) for c in self.get_all()]

    def save(self, categories: List[Category]) -> None:
        """Guarda la colección completa."""
        self.save_all([c.to_dict() for c in categories])

    def get_category(self, category_id: str) -> Optional[Category]:
        record = self.find_by('id', category_id)
        return Category.from_dict(record) if record else None
