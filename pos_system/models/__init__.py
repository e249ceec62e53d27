# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Este módulo define todas las entidades del dominio usando dataclasses.
# Independiente del mecanismo de persistencia (archivos JSON por clave).
# ==============================================================================

from .entities import (
    # Catálogo
    Category,
    Item,
    Unit,
    VALID_UNITS,
    DEFAULT_UNIT,

    # Ventas
    Sale,
    SaleItem,
    DEFAULT_CUSTOMER_NAME,

    # Configuración
    BusinessSettings,
    CURRENCIES,
    DEFAULT_CURRENCY,
    RECEIPT_LAYOUTS,
    DEFAULT_LAYOUT,
    IMAGE_FIELDS,
    MAX_IMAGE_BYTES,

    # Utilidades
    round_money,
    normalize_number,
    clean_text,
)

__all__ = [
    'Category',
    'Item',
    'Unit',
    'VALID_UNITS',
    'DEFAULT_UNIT',
    'Sale',
    'SaleItem',
    'DEFAULT_CUSTOMER_NAME',
    'BusinessSettings',
    'CURRENCIES',
    'DEFAULT_CURRENCY',
    'RECEIPT_LAYOUTS',
    'DEFAULT_LAYOUT',
    'IMAGE_FIELDS',
    'MAX_IMAGE_BYTES',
    'round_money',
    'normalize_number',
    'clean_text',
]
