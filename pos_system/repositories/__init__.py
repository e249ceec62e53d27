# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Esta capa encapsula todo el acceso al almacén local (una clave por archivo
# JSON). Las interfaces (métodos públicos) son lo único que ven los servicios.
#
# ESTRUCTURA:
# ├── interfaces.py           → Protocolos/Interfaces
# ├── base.py                 → Clases base (DictRepository, ListRepository)
# ├── category_repository.py  → Clave pos-categories
# ├── item_repository.py      → Clave pos-items
# ├── sales_repository.py     → Clave pos-sales
# └── settings_repository.py  → Clave pos-settings
# ==============================================================================

from .interfaces import (
    IListRepository,
    IDictRepository,
    ICategoryRepository,
    IItemRepository,
    ISalesRepository,
    ISettingsRepository,
)

from .base import BaseRepository, DictRepository, ListRepository, generate_id
from .category_repository import CategoryRepository
from .item_repository import ItemRepository
from .sales_repository import SalesRepository
from .settings_repository import SettingsRepository

__all__ = [
    # Interfaces
    'IListRepository',
    'IDictRepository',
    'ICategoryRepository',
    'IItemRepository',
    'ISalesRepository',
    'ISettingsRepository',

    # Clases base
    'BaseRepository',
    'DictRepository',
    'ListRepository',
    'generate_id',

    # Implementaciones JSON
    'CategoryRepository',
    'ItemRepository',
    'SalesRepository',
    'SettingsRepository',
]
