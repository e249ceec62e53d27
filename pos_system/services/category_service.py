# ==============================================================================
# SERVICIO DE CATEGORÍAS
# ==============================================================================
# Centraliza la lógica de negocio de las categorías del catálogo.
# Cada operación carga la colección completa, la modifica en memoria y la
# vuelve a guardar entera.
# ==============================================================================

from typing import List

from pos_system.models import Category, clean_text
from pos_system.repositories.base import generate_id
from pos_system.repositories.interfaces import ICategoryRepository, IItemRepository
from pos_system.services.errors import (
    ConfirmationRequiredError,
    NotFoundError,
    ValidationError,
)


class CategoryService:
    """
    Servicio para gestión de categorías.

    Responsabilidades:
    - Crear / renombrar / eliminar categorías
    - Nombres únicos sin distinguir mayúsculas
    - Impedir eliminar una categoría usada por algún item
    """

    def __init__(self, category_repo: ICategoryRepository, item_repo: IItemRepository):
        """
        Inicializa el servicio de categorías.

        Args:
            category_repo: Repositorio de categorías
            item_repo: Repositorio de items (para verificar uso y renombrar)
        """
        self.category_repo = category_repo
        self.item_repo = item_repo

    def list(self) -> List[Category]:
        return self.category_repo.load()

    def _clean_name(self, name: str) -> str:
        name = clean_text(name)
        if not name:
            raise ValidationError("Ingresa un nombre de categoría.")
        return name

    def _check_duplicate(self, categories: List[Category], name: str, exclude_id: str = None) -> None:
        lowered = name.lower()
        for category in categories:
            if category.id != exclude_id and category.name.lower() == lowered:
                raise ValidationError("El nombre de categoría ya existe.")

    def create(self, name: str) -> Category:
        """
        Crea una categoría nueva.

        Raises:
            ValidationError: Nombre vacío o duplicado
        """
        name = self._clean_name(name)
        with self.category_repo.lock:
            categories = self.category_repo.load()
            self._check_duplicate(categories, name)

            category = Category(id=generate_id(c.id for c in categories), name=name)
            categories.append(category)
            self.category_repo.save(categories)
        return category

    def update(self, category_id: str, name: str) -> Category:
        """
        Renombra una categoría.
        Los items que usaban el nombre anterior pasan al nuevo.

        Raises:
            ValidationError: Nombre vacío o duplicado
            NotFoundError: La categoría no existe
        """
        name = self._clean_name(name)
        with self.category_repo.lock:
            categories = self.category_repo.load()
            target = next((c for c in categories if c.id == category_id), None)
            if target is None:
                raise NotFoundError("Categoría no encontrada.")

            self._check_duplicate(categories, name, exclude_id=category_id)

            old_name = target.name
            target.name = name
            self.category_repo.save(categories)

            if old_name != name:
                items = self.item_repo.load()
                renamed = False
                for item in items:
                    if item.category == old_name:
                        item.category = name
                        renamed = True
                if renamed:
                    self.item_repo.save(items)
        return target

    def delete(self, category_id: str, confirmed: bool = False) -> Category:
        """
        Elimina una categoría.

        Raises:
            NotFoundError: La categoría no existe
            ValidationError: Algún item usa la categoría
            ConfirmationRequiredError: Falta la confirmación del usuario
        """
        with self.category_repo.lock:
            categories = self.category_repo.load()
            target = next((c for c in categories if c.id == category_id), None)
            if target is None:
                raise NotFoundError("Categoría no encontrada.")

            if self.item_repo.uses_category(target.name):
                raise ValidationError("No se puede eliminar una categoría usada por items.")

            if not confirmed:
                raise ConfirmationRequiredError(
                    f"¿Seguro que deseas eliminar la categoría '{target.name}'?"
                )

            self.category_repo.save([c for c in categories if c.id != category_id])
        return target
