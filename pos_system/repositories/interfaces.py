# ==============================================================================
# INTERFACES DE REPOSITORIOS
# ==============================================================================
#
# Este archivo define las interfaces (protocolos) que todos los repositorios
# deben implementar. Esto permite:
#
# 1. INDEPENDENCIA DE ALMACENAMIENTO
#    - Los servicios dependen de interfaces, NO de implementaciones concretas
#    - Cambiar archivos JSON por otro almacén solo requiere nueva implementación
#
# 2. TESTING
#    - Fácil crear dobles que implementen estas interfaces
#
# ==============================================================================

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from pos_system.models import Category, Item, Sale


# ==============================================================================
# INTERFACES BASE
# ==============================================================================

@runtime_checkable
class IListRepository(Protocol):
    """
    Interfaz para claves que guardan una lista (get-all / set-all).
    Usado por: Categorías, Items, Ventas.
    """

    def get_all(self) -> List[Dict[str, Any]]:
        """Obtiene todos los registros."""
        ...

    def save_all(self, data: List[Dict[str, Any]]) -> None:
        """Guarda todos los registros."""
        ...


@runtime_checkable
class IDictRepository(Protocol):
    """
    Interfaz para claves que guardan un único objeto.
    Usado por: Configuración.
    """

    def get_all(self) -> Dict[str, Any]:
        ...

    def save_all(self, data: Dict[str, Any]) -> None:
        ...

    def clear(self) -> None:
        """Elimina la clave por completo."""
        ...


# ==============================================================================
# INTERFACES ESPECÍFICAS POR DOMINIO
# ==============================================================================

@runtime_checkable
class ICategoryRepository(Protocol):

    @property
    def lock(self) -> Any:
        """Lock que agrupa un ciclo leer-modificar-escribir."""
        ...

    def load(self) -> List[Category]:
        ...

    def save(self, categories: List[Category]) -> None:
        ...

    def get_category(self, category_id: str) -> Optional[Category]:
        ...


@runtime_checkable
class IItemRepository(Protocol):

    @property
    def lock(self) -> Any:
        ...

    def load(self) -> List[Item]:
        ...

    def save(self, items: List[Item]) -> None:
        ...

    def get_item(self, item_id: str) -> Optional[Item]:
        ...

    def uses_category(self, category_name: str) -> bool:
        """Verifica si algún item referencia la categoría."""
        ...


@runtime_checkable
class ISalesRepository(Protocol):

    @property
    def lock(self) -> Any:
        ...

    def load(self) -> List[Sale]:
        ...

    def get_sale(self, sale_id: str) -> Optional[Sale]:
        ...

    def create_sale(self, sale: Sale) -> str:
        """Agrega una venta nueva, retorna su id."""
        ...

    def update_sale(self, sale: Sale) -> bool:
        """Reemplaza en su lugar la venta con el mismo id."""
        ...

    def delete_sale(self, sale_id: str) -> Optional[Sale]:
        ...


@runtime_checkable
class ISettingsRepository(Protocol):

    def load(self) -> Dict[str, Any]:
        ...

    def save(self, settings: Dict[str, Any]) -> None:
        ...

    def clear(self) -> None:
        ...
