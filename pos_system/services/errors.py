# ==============================================================================
# ERRORES DE NEGOCIO
# ==============================================================================
# Los servicios lanzan estas excepciones; las rutas las convierten en
# respuestas {"ok": False, "error": ...}. Cuando se lanzan, NADA se escribió.
# ==============================================================================


class PosError(Exception):
    """Excepción base de la aplicación."""
    status_code = 400


class ValidationError(PosError):
    """Dato inválido: campo vacío, precio inválido, nombre duplicado, etc."""
    status_code = 400


class NotFoundError(PosError):
    """El registro pedido no existe."""
    status_code = 404


class ConfirmationRequiredError(PosError):
    """Operación destructiva sin confirmación explícita del usuario."""
    status_code = 409
