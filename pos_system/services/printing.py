# ==============================================================================
# IMPRESIÓN DE BOLETAS
# ==============================================================================
# Todo el subsistema de impresión queda detrás de IPrinter.print_document().
# Las demoras fijas (imprimir / limpiar) viven solo en las implementaciones.
#
# - FramePrinter: arma la página que escribe la boleta en un iframe oculto del
#   navegador, llama a print() y luego quita el iframe.
# - SpoolPrinter: deja la boleta en un directorio de cola y borra el archivo
#   pasado un tiempo. Los errores se registran y NO se muestran al usuario.
# ==============================================================================

import os
import threading
import uuid
from typing import Dict, List, Optional, Protocol, runtime_checkable

from jinja2 import Environment, PackageLoader, select_autoescape

from pos_system.performance_logger import log_error

PRINT_DELAY_MS = 300
CLEANUP_DELAY_MS = 1000


@runtime_checkable
class IPrinter(Protocol):
    """Interfaz única hacia el subsistema de impresión."""

    def print_document(self, document: str) -> Optional[str]:
        """Manda a imprimir un documento HTML completo."""
        ...


class FramePrinter:
    """
    Impresión en el navegador mediante un iframe oculto.
    print_document() retorna la página HTML que hace la impresión.
    """

    def __init__(self, print_delay_ms: int = PRINT_DELAY_MS, cleanup_delay_ms: int = CLEANUP_DELAY_MS):
        self.print_delay_ms = print_delay_ms
        self.cleanup_delay_ms = cleanup_delay_ms
        self._env = Environment(
            loader=PackageLoader('pos_system', 'templates'),
            autoescape=select_autoescape(['html']),
        )

    def print_document(self, document: str) -> str:
        template = self._env.get_template('print_frame.html')
        return template.render(
            document=document,
            print_delay_ms=self.print_delay_ms,
            cleanup_delay_ms=self.cleanup_delay_ms,
        )


class SpoolPrinter:
    """
    Impresión por directorio de cola (lo consume el servicio de impresión del
    sistema). Cada documento se borra tras cleanup_delay segundos.
    """

    def __init__(self, spool_dir: str, cleanup_delay: float = CLEANUP_DELAY_MS / 1000.0):
        self.spool_dir = spool_dir
        self.cleanup_delay = cleanup_delay
        # Limpiezas pendientes por ruta; cleanup() quita la entrada
        self._timers: Dict[str, threading.Timer] = {}
        self._timers_lock = threading.Lock()

    def print_document(self, document: str) -> Optional[str]:
        """
        Escribe el documento en la cola.

        Returns:
            Ruta del archivo en cola, o None si falló (el error queda en errors.log)
        """
        try:
            os.makedirs(self.spool_dir, exist_ok=True)
            path = os.path.join(self.spool_dir, f"receipt-{uuid.uuid4().hex}.html")
            with open(path, 'w', encoding='utf-8') as f:
                f.write(document)
        except OSError as e:
            log_error("Impresión: no se pudo escribir en la cola", e)
            return None

        print(f"[INFO] Boleta enviada a la cola de impresión: {path}")
        timer = threading.Timer(self.cleanup_delay, self.cleanup, args=(path,))
        timer.daemon = True
        with self._timers_lock:
            self._timers[path] = timer
        timer.start()
        return path

    def pending(self) -> List[str]:
        """Rutas que todavía esperan su limpieza."""
        with self._timers_lock:
            return list(self._timers)

    def cleanup(self, path: str) -> None:
        """Borra un archivo de la cola; si ya no existe no hace nada."""
        with self._timers_lock:
            timer = self._timers.pop(path, None)
        if timer is not None:
            timer.cancel()
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            log_error(f"Impresión: no se pudo borrar {path}", e)

    def cancel_pending(self) -> None:
        """Cancela las limpiezas programadas (al cerrar la app o en tests)."""
        with self._timers_lock:
            timers = list(self._timers.values())
            self._timers = {}
        for timer in timers:
            timer.cancel()
