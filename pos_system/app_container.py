# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Este módulo proporciona una forma centralizada de obtener instancias
# de repositorios y servicios. Facilita:
#   - Inyección de dependencias
#   - Testing (un contenedor por directorio temporal)
#   - Cambiar el almacén sin tocar servicios
#
# Para usar otro almacén (ej: SQLite) basta con crear repositorios que
# implementen las interfaces de repositories/interfaces.py y cambiar las
# importaciones de este archivo.
# ==============================================================================

import os
from typing import Any, MutableMapping, Optional

from pos_system.repositories import (
    CategoryRepository,
    ItemRepository,
    SalesRepository,
    SettingsRepository,
)
from pos_system.services import (
    CategoryService,
    ItemService,
    SaleComposer,
    SalesHistoryService,
    SettingsService,
    IPrinter,
    FramePrinter,
    SpoolPrinter,
)


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Implementa el patrón Singleton para asegurar una única instancia
    de cada repositorio y servicio.

    Uso:
        container = AppContainer(base_path='/path/to/data')
        item_service = container.item_service
        composer = container.sale_composer(session)
    """

    _instance: Optional['AppContainer'] = None

    def __new__(cls, base_path: str = None):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, base_path: str = None):
        """
        Inicializa el contenedor.

        Args:
            base_path: Directorio donde viven los archivos del almacén
        """
        if self._initialized:
            return

        self._base_path = base_path or os.environ.get('POS_DATA_DIR') or os.path.join(os.getcwd(), 'data')

        # Repositorios (lazy loading)
        self._category_repo: Optional[CategoryRepository] = None
        self._item_repo: Optional[ItemRepository] = None
        self._sales_repo: Optional[SalesRepository] = None
        self._settings_repo: Optional[SettingsRepository] = None

        # Servicios (lazy loading)
        self._category_service: Optional[CategoryService] = None
        self._item_service: Optional[ItemService] = None
        self._sales_history_service: Optional[SalesHistoryService] = None
        self._settings_service: Optional[SettingsService] = None
        self._printer: Optional[IPrinter] = None

        self._initialized = True

    @property
    def base_path(self) -> str:
        return self._base_path

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def category_repo(self) -> CategoryRepository:
        """Repositorio de categorías (singleton)."""
        if self._category_repo is None:
            self._category_repo = CategoryRepository(self._base_path)
        return self._category_repo

    @property
    def item_repo(self) -> ItemRepository:
        """Repositorio de items (singleton)."""
        if self._item_repo is None:
            self._item_repo = ItemRepository(self._base_path)
        return self._item_repo

    @property
    def sales_repo(self) -> SalesRepository:
        """Repositorio de ventas (singleton)."""
        if self._sales_repo is None:
            self._sales_repo = SalesRepository(self._base_path)
        return self._sales_repo

    @property
    def settings_repo(self) -> SettingsRepository:
        """Repositorio de configuración (singleton)."""
        if self._settings_repo is None:
            self._settings_repo = SettingsRepository(self._base_path)
        return self._settings_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def category_service(self) -> CategoryService:
        if self._category_service is None:
            self._category_service = CategoryService(self.category_repo, self.item_repo)
        return self._category_service

    @property
    def item_service(self) -> ItemService:
        if self._item_service is None:
            self._item_service = ItemService(self.item_repo, self.category_repo)
        return self._item_service

    @property
    def sales_history_service(self) -> SalesHistoryService:
        if self._sales_history_service is None:
            self._sales_history_service = SalesHistoryService(self.sales_repo)
        return self._sales_history_service

    @property
    def settings_service(self) -> SettingsService:
        if self._settings_service is None:
            self._settings_service = SettingsService(self.settings_repo)
        return self._settings_service

    @property
    def printer(self) -> IPrinter:
        """
        Impresora configurada: SpoolPrinter si POS_PRINT_SPOOL apunta a un
        directorio, si no FramePrinter (impresión desde el navegador).
        """
        if self._printer is None:
            spool_dir = os.environ.get('POS_PRINT_SPOOL')
            self._printer = SpoolPrinter(spool_dir) if spool_dir else FramePrinter()
        return self._printer

    def sale_composer(self, state: MutableMapping[str, Any]) -> SaleComposer:
        """
        Compositor de venta atado a un estado (la sesión del request).
        No es singleton: el estado cambia con cada usuario.
        """
        return SaleComposer(self.item_service, self.sales_repo, state)

    # =========================================================================
    # UTILIDADES
    # =========================================================================

    def reset(self) -> None:
        """
        Reinicia todas las instancias.
        Útil para testing o para recargar datos.
        """
        if isinstance(self._printer, SpoolPrinter):
            self._printer.cancel_pending()

        self._category_repo = None
        self._item_repo = None
        self._sales_repo = None
        self._settings_repo = None

        self._category_service = None
        self._item_service = None
        self._sales_history_service = None
        self._settings_service = None
        self._printer = None

    @classmethod
    def get_instance(cls, base_path: str = None) -> 'AppContainer':
        """
        Obtiene la instancia singleton del contenedor.

        Args:
            base_path: Directorio de datos (solo se usa en primera llamada)
        """
        if cls._instance is None:
            return cls(base_path)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Elimina la instancia singleton (útil para tests)."""
        if cls._instance is not None:
            cls._instance.reset()
            cls._instance = None


def get_container(base_path: str = None) -> AppContainer:
    """Obtiene el contenedor de dependencias global."""
    return AppContainer.get_instance(base_path)
