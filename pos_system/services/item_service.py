# ==============================================================================
# SERVICIO DE ITEMS
# ==============================================================================
# Centraliza toda la lógica de negocio relacionada con los items del catálogo.
# Mantiene el índice posicional 1..N: al eliminar se renumera todo.
# ==============================================================================

import math
from typing import Any, Dict, List, Optional

from pos_system.models import DEFAULT_UNIT, VALID_UNITS, Item, clean_text, round_money
from pos_system.repositories.base import generate_id
from pos_system.repositories.interfaces import ICategoryRepository, IItemRepository
from pos_system.services.errors import (
    ConfirmationRequiredError,
    NotFoundError,
    ValidationError,
)


def parse_price(value: Any) -> float:
    """
    Convierte el precio ingresado a número positivo.

    Raises:
        ValidationError: Si no es numérico o no es mayor a 0
    """
    try:
        price = float(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("Ingresa un precio válido.")
    if not math.isfinite(price):
        raise ValidationError("Ingresa un precio válido.")
    # Se valida ya redondeado: 0.004 se guardaría como 0.0
    price = round_money(price)
    if price <= 0:
        raise ValidationError("Ingresa un precio válido.")
    return price


class ItemService:
    """
    Servicio para gestión de items.

    Responsabilidades:
    - CRUD de items
    - Validar nombre, precio, categoría y unidad
    - Renumerar índices al eliminar
    - Búsqueda por nombre o categoría
    """

    def __init__(self, item_repo: IItemRepository, category_repo: ICategoryRepository):
        """
        Inicializa el servicio de items.

        Args:
            item_repo: Repositorio de items
            category_repo: Repositorio de categorías (para validar la categoría)
        """
        self.item_repo = item_repo
        self.category_repo = category_repo

    # =========================================================================
    # CONSULTAS
    # =========================================================================

    def list(self) -> List[Item]:
        return self.item_repo.load()

    def get(self, item_id: str) -> Optional[Item]:
        return self.item_repo.get_item(item_id)

    def search(self, term: str) -> List[Item]:
        """
        Filtra items cuyo nombre o categoría contiene el término
        (sin distinguir mayúsculas). Recorrido lineal, sin índices.
        """
        items = self.list()
        term = clean_text(term).lower()
        if not term:
            return items
        return [
            item for item in items
            if term in item.name.lower() or term in item.category.lower()
        ]

    # =========================================================================
    # VALIDACIÓN
    # =========================================================================

    def _validate(self, data: Dict[str, Any]) -> Dict[str, Any]:
        name = clean_text(data.get('name'))
        category = clean_text(data.get('category'))
        raw_price = data.get('price')

        if not name or not category or raw_price in (None, ''):
            raise ValidationError("Completa todos los campos requeridos.")

        price = parse_price(raw_price)

        category_names = [c.name for c in self.category_repo.load()]
        if category not in category_names:
            raise ValidationError(f"La categoría '{category}' no existe.")

        unit = clean_text(data.get('unit')) or DEFAULT_UNIT
        if unit not in VALID_UNITS:
            raise ValidationError(f"Unidad inválida: {unit}")

        return {'name': name, 'price': price, 'category': category, 'unit': unit}

    # =========================================================================
    # OPERACIONES
    # =========================================================================

    def create(self, name: str, price: Any, category: str, unit: str = DEFAULT_UNIT) -> Item:
        """
        Crea un item y le asigna el siguiente índice.

        Raises:
            ValidationError: Datos incompletos o inválidos
        """
        fields = self._validate({'name': name, 'price': price, 'category': category, 'unit': unit})
        with self.item_repo.lock:
            items = self.item_repo.load()
            item = Item(
                id=generate_id(i.id for i in items),
                index=len(items) + 1,
                **fields
            )
            items.append(item)
            self.item_repo.save(items)
        return item

    def update(self, item_id: str, updates: Dict[str, Any]) -> Item:
        """
        Reemplaza nombre, precio, categoría y unidad. El índice no cambia.
        Los campos ausentes conservan su valor actual.
        Las ventas ya registradas no se ven afectadas (guardan su propia copia).

        Raises:
            ValidationError: Datos incompletos o inválidos
            NotFoundError: El item no existe
        """
        with self.item_repo.lock:
            items = self.item_repo.load()
            target = next((i for i in items if i.id == item_id), None)
            if target is None:
                raise NotFoundError("Item no encontrado.")

            merged = target.to_dict()
            merged.update({
                k: v for k, v in updates.items()
                if k in ('name', 'price', 'category', 'unit') and v is not None
            })
            fields = self._validate(merged)
            for key, value in fields.items():
                setattr(target, key, value)
            self.item_repo.save(items)
        return target

    def delete(self, item_id: str, confirmed: bool = False) -> Item:
        """
        Elimina un item y renumera los restantes 1..N en su orden actual.

        Raises:
            NotFoundError: El item no existe
            ConfirmationRequiredError: Falta la confirmación del usuario
        """
        with self.item_repo.lock:
            items = self.item_repo.load()
            target = next((i for i in items if i.id == item_id), None)
            if target is None:
                raise NotFoundError("Item no encontrado.")
            if not confirmed:
                raise ConfirmationRequiredError(
                    f"¿Seguro que deseas eliminar el item '{target.name}'?"
                )

            remaining = [i for i in items if i.id != item_id]
            for position, item in enumerate(remaining, start=1):
                item.index = position
            self.item_repo.save(remaining)
        return target
