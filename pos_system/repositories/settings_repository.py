# ==============================================================================
# REPOSITORIO DE CONFIGURACIÓN DEL NEGOCIO
# ==============================================================================
# Encapsula todo el acceso a la clave pos-settings.
# Un único objeto sin id, se sobrescribe completo al guardar:
# {
#     "businessName": "Mi Tienda",
#     "currency": "PKR",
#     "logo": "data:image/png;base64,...",
#     ...
# }
# ==============================================================================

from typing import Any, Dict

from pos_system.repositories.base import DictRepository


class SettingsRepository(DictRepository):
    """Repositorio para el perfil del negocio."""

    KEY = 'pos-settings'

    def __init__(self, base_path: str):
        super().__init__(base_path, self.KEY)

    def load(self) -> Dict[str, Any]:
        """
        Carga el registro guardado.

        Returns:
            Diccionario de configuración (vacío si nunca se guardó)
        """
        return self.get_all()

    def save(self, settings: Dict[str, Any]) -> None:
        """Sobrescribe el registro completo."""
        self.save_all(settings)
