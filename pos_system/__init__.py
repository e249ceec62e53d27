# ==============================================================================
# POS SYSTEM - Punto de venta con almacén local
# ==============================================================================
# Catálogo de categorías e items, venta en caja, boletas imprimibles e
# historial de ventas. La app Flask vive en pos_system.main.
# ==============================================================================

__version__ = "1.0.0"
