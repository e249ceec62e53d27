# ==============================================================================
# SERVICIO DE CONFIGURACIÓN DEL NEGOCIO
# ==============================================================================
# Perfil del negocio que aparece en la boleta: datos de contacto, imágenes
# (guardadas como data URL), diseño de boleta y moneda.
# ==============================================================================

import base64
import mimetypes
from typing import Any, Dict, Optional

from werkzeug.datastructures import FileStorage

from pos_system.models import (
    CURRENCIES,
    IMAGE_FIELDS,
    MAX_IMAGE_BYTES,
    RECEIPT_LAYOUTS,
    BusinessSettings,
)
from pos_system.repositories.interfaces import ISettingsRepository
from pos_system.services.errors import ConfirmationRequiredError, ValidationError


def read_image(filename: str, mimetype: Optional[str], data: bytes) -> str:
    """
    Convierte un archivo de imagen subido a data URL (data:<mime>;base64,...).

    Raises:
        ValidationError: Supera 2 MB o no es una imagen
    """
    if len(data) > MAX_IMAGE_BYTES:
        raise ValidationError("La imagen no debe superar 2 MB.")

    mimetype = mimetype or mimetypes.guess_type(filename or '')[0] or ''
    if not mimetype.startswith('image/'):
        raise ValidationError("Selecciona un archivo de imagen válido.")

    encoded = base64.b64encode(data).decode('ascii')
    return f"data:{mimetype};base64,{encoded}"


class SettingsService:
    """
    Servicio para la configuración del negocio.

    Responsabilidades:
    - Leer la configuración con valores por defecto
    - Validar moneda, diseño e imágenes antes de guardar
    - Restablecer todo a los valores por defecto
    """

    def __init__(self, settings_repo: ISettingsRepository):
        self.settings_repo = settings_repo

    def get(self) -> BusinessSettings:
        return BusinessSettings.from_dict(self.settings_repo.load())

    def save(self, data: Dict[str, Any]) -> BusinessSettings:
        """
        Guarda el objeto completo. Los campos ausentes conservan su valor
        actual y las claves desconocidas se ignoran.

        Raises:
            ValidationError: Moneda, diseño o imagen inválidos
        """
        merged = self.get().to_dict()
        for name in BusinessSettings.field_names():
            if name in data and data[name] is not None:
                value = data[name]
                merged[name] = value.strip() if isinstance(value, str) else str(value)

        if merged['currency'] not in CURRENCIES:
            raise ValidationError(f"Moneda inválida: {merged['currency']}")
        if merged['receiptLayout'] not in RECEIPT_LAYOUTS:
            raise ValidationError(f"Diseño de boleta inválido: {merged['receiptLayout']}")
        for name in IMAGE_FIELDS:
            if merged[name] and not merged[name].startswith('data:image/'):
                raise ValidationError(f"La imagen '{name}' no es válida.")

        settings = BusinessSettings.from_dict(merged)
        self.settings_repo.save(settings.to_dict())
        return settings

    def read_upload(self, field_name: str, storage: FileStorage) -> str:
        """
        Lee una imagen subida para uno de los campos de imagen.
        No guarda: la interfaz la previsualiza y se guarda con save().

        Raises:
            ValidationError: Campo desconocido o archivo inválido
        """
        if field_name not in IMAGE_FIELDS:
            raise ValidationError(f"Campo de imagen desconocido: {field_name}")
        if storage is None or not storage.filename:
            raise ValidationError("No se seleccionó ningún archivo.")
        # Lee un byte más del límite para detectar archivos grandes sin cargarlos enteros
        data = storage.stream.read(MAX_IMAGE_BYTES + 1)
        return read_image(storage.filename, storage.mimetype, data)

    def reset(self, confirmed: bool = False) -> BusinessSettings:
        """
        Elimina la configuración guardada y retorna los valores por defecto.

        Raises:
            ConfirmationRequiredError: Falta la confirmación del usuario
        """
        if not confirmed:
            raise ConfirmationRequiredError(
                "¿Seguro que deseas restablecer toda la configuración?"
            )
        self.settings_repo.clear()
        return BusinessSettings()
