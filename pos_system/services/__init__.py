# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# Esta capa contiene TODA la lógica de negocio de la aplicación.
#
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Aplican reglas de negocio y validaciones (antes de escribir nada)
# 3. Las rutas (controllers) solo llaman a servicios
# 4. Los servicios NO conocen el tipo de almacenamiento
#
# ESTRUCTURA:
# ├── errors.py                → Excepciones de negocio (400/404/409)
# ├── category_service.py      → Categorías
# ├── item_service.py          → Items del catálogo, índices 1..N
# ├── sale_composer.py         → Venta en curso, entrada rápida, completar
# ├── sales_history_service.py → Historial, búsqueda, eliminar, editar
# ├── settings_service.py      → Perfil del negocio, imágenes
# ├── receipt_service.py       → Documento HTML de la boleta
# └── printing.py              → IPrinter (iframe / cola de impresión)
# ==============================================================================

from pos_system.services.errors import (
    PosError,
    ValidationError,
    NotFoundError,
    ConfirmationRequiredError,
)
from pos_system.services.category_service import CategoryService
from pos_system.services.item_service import ItemService, parse_price
from pos_system.services.sale_composer import SaleComposer, parse_quantity
from pos_system.services.sales_history_service import SalesHistoryService
from pos_system.services.settings_service import SettingsService, read_image
from pos_system.services.receipt_service import render_receipt
from pos_system.services.printing import IPrinter, FramePrinter, SpoolPrinter

__all__ = [
    'PosError',
    'ValidationError',
    'NotFoundError',
    'ConfirmationRequiredError',
    'CategoryService',
    'ItemService',
    'parse_price',
    'SaleComposer',
    'parse_quantity',
    'SalesHistoryService',
    'SettingsService',
    'read_image',
    'render_receipt',
    'IPrinter',
    'FramePrinter',
    'SpoolPrinter',
]
