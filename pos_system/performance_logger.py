# ==============================================================================
# SISTEMA DE PROFILING Y LOGS INTERNOS
# ==============================================================================
# Mide rendimiento de rutas y funciones sin afectar la experiencia del usuario.
# Guarda logs legibles en /logs/ para análisis humano.
# También centraliza el registro de errores silenciados (impresión, JSON corrupto).
#
# ACTIVAR/DESACTIVAR: Variable de entorno POS_PROFILING (1/0)
# DIRECTORIO: Variable de entorno POS_LOGS_DIR
# ==============================================================================

import os
import time
import threading
from datetime import datetime
from functools import wraps

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

ENABLE_PROFILING = os.environ.get('POS_PROFILING', '1') == '1'

# Umbrales de tiempo (en milisegundos)
THRESHOLD_WARNING = 300   # Advertencia si supera 300ms
THRESHOLD_CRITICAL = 700  # Crítico si supera 700ms

LOGS_DIR = os.environ.get('POS_LOGS_DIR') or os.path.join(os.getcwd(), 'logs')

PERFORMANCE_LOG = os.path.join(LOGS_DIR, 'performance.log')
SLOW_ROUTES_LOG = os.path.join(LOGS_DIR, 'slow_routes.log')
SLOW_FUNCTIONS_LOG = os.path.join(LOGS_DIR, 'slow_functions.log')
ERRORS_LOG = os.path.join(LOGS_DIR, 'errors.log')

# Mapeo de rutas a nombres legibles (para logs más humanos)
ROUTE_NAMES = {
    'GET /api/csrf': 'Token CSRF',

    # Catálogo
    'GET /api/categories': 'Ver categorías',
    'POST /api/categories': 'Crear categoría',
    'PUT /api/categories/<category_id>': 'Editar categoría',
    'DELETE /api/categories/<category_id>': 'Eliminar categoría',
    'GET /api/items': 'Ver items',
    'POST /api/items': 'Crear item',
    'PUT /api/items/<item_id>': 'Editar item',
    'DELETE /api/items/<item_id>': 'Eliminar item',

    # Venta en curso
    'GET /api/sale': 'Ver venta en curso',
    'POST /api/sale/items': 'Agregar a la venta',
    'POST /api/sale/complete': 'Completar venta',
    'GET /api/sale/receipt': 'Boleta de venta en curso',

    # Historial
    'GET /api/sales': 'Ver historial',
    'DELETE /api/sales/<sale_id>': 'Eliminar venta',
    'GET /receipt/<sale_id>': 'Ver boleta',
    'POST /api/sales/<sale_id>/print': 'Imprimir boleta',
    'POST /api/sales/<sale_id>/edit': 'Editar venta',

    # Configuración
    'GET /api/settings': 'Ver configuración',
    'POST /api/settings': 'Guardar configuración',
    'POST /api/settings/reset': 'Restablecer configuración',
    'POST /api/settings/images/<field_name>': 'Subir imagen',
}


_write_lock = threading.Lock()


# ═══════════════════════════════════════════════════════════════════════════
# FUNCIONES DE LOGGING
# ═══════════════════════════════════════════════════════════════════════════

def _get_timestamp():
    """Obtiene timestamp legible"""
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def _write_log(filepath, content):
    """Escribe contenido a un archivo de log (thread-safe)"""
    try:
        with _write_lock:
            os.makedirs(os.path.dirname(filepath), exist_ok=True)
            with open(filepath, 'a', encoding='utf-8') as f:
                f.write(content)
    except OSError:
        pass  # Un log que falla no debe tumbar la app


def _get_route_name(method, path, rule=None):
    """
    Obtiene nombre legible para una ruta.
    Intenta hacer match con ROUTE_NAMES, si no, devuelve la ruta raw.
    """
    key = f"{method} {path}"
    if key in ROUTE_NAMES:
        return ROUTE_NAMES[key]

    if rule:
        rule_key = f"{method} {rule}"
        if rule_key in ROUTE_NAMES:
            return ROUTE_NAMES[rule_key]

    return f"{method} {path}"


def log_error(context, error=None):
    """
    Registra un error que se decidió no propagar (impresión, archivo corrupto).

    Args:
        context: Descripción corta de dónde ocurrió
        error: Excepción capturada (opcional)
    """
    detail = f"{type(error).__name__}: {error}" if error is not None else ''
    print(f"[ERROR] {context} {detail}".rstrip())
    if not ENABLE_PROFILING:
        return
    _write_log(ERRORS_LOG, f"[ERROR] {_get_timestamp()} {context} {detail}\n")


def log_warning(message):
    """Advertencia visible en consola y en errors.log."""
    print(f"[ADVERTENCIA] {message}")
    if not ENABLE_PROFILING:
        return
    _write_log(ERRORS_LOG, f"[ADVERTENCIA] {_get_timestamp()} {message}\n")


# ═══════════════════════════════════════════════════════════════════════════
# 1️⃣ PROFILING DE RUTAS (Middleware Flask)
# ═══════════════════════════════════════════════════════════════════════════

def log_route_performance(method, path, rule, time_ms):
    """
    Registra el rendimiento de una ruta en performance.log

    Args:
        method: GET, POST, etc.
        path: Ruta solicitada (/api/sale/items)
        rule: Regla de Flask (/api/sale/items/<item_id>)
        time_ms: Tiempo en milisegundos
    """
    if not ENABLE_PROFILING:
        return

    action_name = _get_route_name(method, path, rule)

    log_entry = f"""
════════════════════════════════════════
[PERFORMANCE] {_get_timestamp()}
────────────────────────────────────────
Acción: {action_name}
Ruta: {method} {path}
Tiempo: {time_ms:.0f} ms
"""

    _write_log(PERFORMANCE_LOG, log_entry)


def log_slow_route(method, path, rule, time_ms, level='WARNING'):
    """
    Registra una ruta lenta en slow_routes.log

    Args:
        level: 'WARNING' (>300ms) o 'CRITICAL' (>700ms)
    """
    if not ENABLE_PROFILING:
        return

    action_name = _get_route_name(method, path, rule)
    severity = 'LENTA' if level == 'WARNING' else 'MUY LENTA'
    threshold = THRESHOLD_WARNING if level == 'WARNING' else THRESHOLD_CRITICAL

    log_entry = f"""
[{level}] {_get_timestamp()}
────────────────────────────────────────
Ruta {severity}: {action_name}
Detalle: {method} {path}
Tiempo: {time_ms:.0f} ms (umbral: {threshold} ms)
────────────────────────────────────────
"""

    _write_log(SLOW_ROUTES_LOG, log_entry)


# ═══════════════════════════════════════════════════════════════════════════
# 2️⃣ HOOKS PARA FLASK (before/after request)
# ═══════════════════════════════════════════════════════════════════════════

def init_profiling(app):
    """
    Inicializa el sistema de profiling en una app Flask.
    Registra hooks before_request y after_request.

    Uso:
        from pos_system.performance_logger import init_profiling
        init_profiling(app)
    """
    if not ENABLE_PROFILING:
        return

    @app.before_request
    def _start_timer():
        from flask import g
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        from flask import g, request

        if not hasattr(g, 'start_time'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000  # ms

        method = request.method
        path = request.path
        rule = str(request.url_rule) if request.url_rule else path

        if path.startswith('/static'):
            return response

        log_route_performance(method, path, rule, elapsed)

        if elapsed >= THRESHOLD_CRITICAL:
            log_slow_route(method, path, rule, elapsed, 'CRITICAL')
        elif elapsed >= THRESHOLD_WARNING:
            log_slow_route(method, path, rule, elapsed, 'WARNING')

        return response


# ═══════════════════════════════════════════════════════════════════════════
# 3️⃣ DECORADOR PARA FUNCIONES CLAVE
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Decorador para medir rendimiento de funciones críticas.

    Uso:
        @profile_function
        def mi_funcion():
            ...

        @profile_function(name="Completar venta")
        def complete_sale():
            ...

    Las llamadas que superan THRESHOLD_WARNING quedan en slow_functions.log.
    """
    def decorator(fn):
        if not ENABLE_PROFILING:
            return fn

        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000

                if elapsed_ms >= THRESHOLD_WARNING:
                    _log_slow_function_call(func_name, elapsed_ms)

        return wrapper

    # Permitir uso sin paréntesis: @profile_function
    if func is not None:
        return decorator(func)
    return decorator


def _log_slow_function_call(func_name, time_ms):
    """Registra una llamada lenta a una función"""
    severity = 'CRÍTICO' if time_ms >= THRESHOLD_CRITICAL else 'LENTO'

    log_entry = f"""
[{severity}] {_get_timestamp()}
Función: {func_name}
Tiempo: {time_ms:.0f} ms
────────────────────────────────────────
"""

    _write_log(SLOW_FUNCTIONS_LOG, log_entry)


__all__ = [
    'ENABLE_PROFILING',
    'init_profiling',
    'profile_function',
    'log_error',
    'log_warning',
]
