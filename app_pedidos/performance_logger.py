# ==============================================================================
# SISTEMA DE PROFILING INTERNO
# ==============================================================================
# Mide cuánto tardan las rutas de la tienda y del panel, y las funciones
# marcadas con @profile_function (restablecer menú, subir o generar imágenes).
# Los registros son bloques de texto legibles en LOGS_DIR:
#
#   performance.log     → cada petición
#   slow_routes.log     → peticiones que superan los umbrales
#   slow_functions.log  → funciones perfiladas lentas
#
# ACTIVAR/DESACTIVAR: variable de entorno PEDIDOS_PROFILING o configure()
# ==============================================================================

import os
import threading
import time
from collections import defaultdict
from datetime import datetime
from functools import wraps
from typing import Dict, Optional

from app_pedidos import config

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

ENABLE_PROFILING = os.environ.get('PEDIDOS_PROFILING', '1').strip().lower() not in ('0', 'false', 'off', 'no')

# Umbrales en milisegundos
THRESHOLD_WARNING = 300
THRESHOLD_CRITICAL = 700

LOGS_DIR = config.LOGS_DIR

PERFORMANCE_LOG = 'performance.log'
SLOW_ROUTES_LOG = 'slow_routes.log'
SLOW_FUNCTIONS_LOG = 'slow_functions.log'

SEPARATOR = '─' * 40

# Acción legible de cada ruta ('MÉTODO regla' → texto)
ROUTE_NAMES = {
    # Tienda
    'GET /api/menu': 'Ver menú',
    'GET /api/csrf': 'Obtener token CSRF',
    'GET /api/carrito': 'Ver carrito',
    'POST /api/carrito/agregar': 'Agregar al carrito',
    'POST /api/carrito/eliminar': 'Quitar del carrito',
    'POST /api/carrito/cantidad': 'Cambiar cantidad',
    'POST /api/carrito/limpiar': 'Vaciar carrito',
    'POST /api/checkout': 'Enviar pedido',

    # Sesión de administrador
    'POST /api/admin/login': 'Iniciar sesión',
    'POST /api/admin/logout': 'Cerrar sesión',

    # Panel y pedidos
    'GET /api/admin/dashboard': 'Ver panel principal',
    'GET /api/admin/orders': 'Ver tablero de pedidos',
    'POST /api/admin/orders/<order_id>/status': 'Cambiar estado del pedido',
    'GET /api/admin/orders/<order_id>/ticket': 'Imprimir ticket de cocina',
    'GET /api/admin/notifications': 'Revisar pedidos nuevos',
    'POST /api/admin/notifications/permission': 'Activar notificaciones',
    'GET /api/admin/audit': 'Ver registro de actividad',

    # Catálogo
    'GET /api/admin/products': 'Ver productos',
    'POST /api/admin/products': 'Crear producto',
    'GET /api/admin/products/<product_id>': 'Obtener producto',
    'PUT /api/admin/products/<product_id>': 'Editar producto',
    'DELETE /api/admin/products/<product_id>': 'Eliminar producto',
    'GET /api/admin/categories': 'Ver categorías',
    'POST /api/admin/categories': 'Crear categoría',
    'PUT /api/admin/categories/<category_id>': 'Renombrar categoría',
    'DELETE /api/admin/categories/<category_id>': 'Eliminar categoría',
    'POST /api/admin/catalog/reset': 'Restablecer menú',

    # Tienda e imágenes
    'GET /api/admin/settings/shop': 'Ver estado de la tienda',
    'POST /api/admin/settings/shop': 'Abrir/cerrar tienda',
    'POST /api/admin/images/upload': 'Subir imagen',
    'GET /api/admin/images/sign': 'Firmar subida de imagen',
    'POST /api/admin/images/generate': 'Generar imagen con IA',
}


def configure(enabled: Optional[bool] = None, logs_dir: Optional[str] = None) -> None:
    """
    Cambia la configuración en caliente (tests, scripts).

    Args:
        enabled: Activar/desactivar el profiling
        logs_dir: Directorio donde escribir los logs
    """
    global ENABLE_PROFILING, LOGS_DIR
    if enabled is not None:
        ENABLE_PROFILING = bool(enabled)
    if logs_dir is not None:
        LOGS_DIR = logs_dir


# ═══════════════════════════════════════════════════════════════════════════
# ESCRITURA DE BLOQUES
# ═══════════════════════════════════════════════════════════════════════════

_log_lock = threading.Lock()


def _now_text() -> str:
    return datetime.now().strftime('%Y-%m-%d %H:%M:%S')


def _write_log(filename: str, lines) -> None:
    """Agrega un bloque de líneas a un log. Un log que falla no tumba la petición."""
    block = '\n' + '\n'.join(lines) + '\n'
    try:
        with _log_lock:
            os.makedirs(LOGS_DIR, exist_ok=True)
            with open(os.path.join(LOGS_DIR, filename), 'a', encoding='utf-8') as f:
                f.write(block)
    except OSError as e:
        print(f"[ADVERTENCIA] No se pudo escribir {filename}: {e}")


def _severity(time_ms: float) -> Optional[str]:
    """'CRITICAL', 'WARNING' o None según los umbrales."""
    if time_ms >= THRESHOLD_CRITICAL:
        return 'CRITICAL'
    if time_ms >= THRESHOLD_WARNING:
        return 'WARNING'
    return None


def _get_route_name(method: str, path: str, rule: Optional[str] = None) -> str:
    """
    Acción legible de una petición.

    Busca primero la ruta concreta y después la regla de Flask
    ('/api/admin/orders/<order_id>/status'); si ninguna está en
    ROUTE_NAMES devuelve 'MÉTODO /ruta'.
    """
    for candidate in (path, rule):
        if candidate and f"{method} {candidate}" in ROUTE_NAMES:
            return ROUTE_NAMES[f"{method} {candidate}"]
    return f"{method} {path}"


# ═══════════════════════════════════════════════════════════════════════════
# RUTAS
# ═══════════════════════════════════════════════════════════════════════════

def log_route_performance(method, path, rule, time_ms, user=None):
    """
    Registra una petición en performance.log

    Args:
        method: GET, POST, etc.
        path: Ruta solicitada (/api/carrito/agregar)
        rule: Regla de Flask (/api/admin/orders/<order_id>/status)
        time_ms: Tiempo en milisegundos
        user: Sesión de administrador (None = cliente de la tienda)
    """
    if not ENABLE_PROFILING:
        return
    _write_log(PERFORMANCE_LOG, [
        '═' * 40,
        f"[PERFORMANCE] {_now_text()}",
        SEPARATOR,
        f"Acción: {_get_route_name(method, path, rule)}",
        f"Sesión: {user or 'cliente'}",
        f"Petición: {method} {path}",
        f"Duración: {time_ms:.0f} ms",
    ])


def log_slow_route(method, path, rule, time_ms, user=None, level='WARNING'):
    """
    Registra una petición lenta en slow_routes.log

    Args:
        level: 'WARNING' (>= 300 ms) o 'CRITICAL' (>= 700 ms)
    """
    if not ENABLE_PROFILING:
        return
    critical = level == 'CRITICAL'
    _write_log(SLOW_ROUTES_LOG, [
        f"{'🔴' if critical else '⚠️'} [{level}] {_now_text()}",
        SEPARATOR,
        f"Ruta {'MUY LENTA' if critical else 'LENTA'}: {_get_route_name(method, path, rule)}",
        f"Sesión: {user or 'cliente'}",
        f"Petición: {method} {path}",
        f"Duración: {time_ms:.0f} ms (umbral: {THRESHOLD_CRITICAL if critical else THRESHOLD_WARNING} ms)",
        SEPARATOR,
    ])


def init_profiling(app):
    """
    Registra los hooks de medición en la app Flask.

    Uso:
        from app_pedidos.performance_logger import init_profiling
        init_profiling(app)
    """
    from flask import g, request, session

    @app.before_request
    def _start_timer():
        g.profiling_started = time.perf_counter()

    @app.after_request
    def _log_request(response):
        started = g.get('profiling_started')
        if not ENABLE_PROFILING or started is None:
            return response

        elapsed_ms = (time.perf_counter() - started) * 1000
        rule = str(request.url_rule) if request.url_rule else request.path
        user = session.get('admin_uid')

        log_route_performance(request.method, request.path, rule, elapsed_ms, user)
        level = _severity(elapsed_ms)
        if level:
            log_slow_route(request.method, request.path, rule, elapsed_ms, user, level)
        return response


# ═══════════════════════════════════════════════════════════════════════════
# FUNCIONES PERFILADAS
# ═══════════════════════════════════════════════════════════════════════════

# nombre → {calls, total_ms, max_ms}
_function_stats: Dict[str, Dict[str, float]] = defaultdict(lambda: {'calls': 0, 'total_ms': 0.0, 'max_ms': 0.0})
_stats_lock = threading.Lock()


def _record_call(func_name: str, elapsed_ms: float) -> None:
    with _stats_lock:
        entry = _function_stats[func_name]
        entry['calls'] += 1
        entry['total_ms'] += elapsed_ms
        entry['max_ms'] = max(entry['max_ms'], elapsed_ms)

    level = _severity(elapsed_ms)
    if level:
        _write_log(SLOW_FUNCTIONS_LOG, [
            f"{'🔴' if level == 'CRITICAL' else '⚠️'} [{'CRÍTICO' if level == 'CRITICAL' else 'LENTO'}] {_now_text()}",
            f"Función: {func_name}",
            f"Duración: {elapsed_ms:.0f} ms",
            SEPARATOR,
        ])


def profile_function(func=None, name=None):
    """
    Mide las llamadas de una función clave.

    Uso:
        @profile_function
        def generar():
            ...

        @profile_function(name="Restablecer catálogo")
        def reset_catalog():
            ...
    """
    def decorator(fn):
        label = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not ENABLE_PROFILING:
                return fn(*args, **kwargs)
            started = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                _record_call(label, (time.perf_counter() - started) * 1000)

        return wrapper

    return decorator(func) if func is not None else decorator


def get_function_stats() -> Dict[str, Dict[str, float]]:
    """
    Resumen de las funciones perfiladas.

    Returns:
        {nombre: {calls, avg_time, max_time}} con tiempos en ms
    """
    with _stats_lock:
        return {
            label: {
                'calls': int(entry['calls']),
                'avg_time': round(entry['total_ms'] / entry['calls'], 2) if entry['calls'] else 0,
                'max_time': round(entry['max_ms'], 2),
            }
            for label, entry in _function_stats.items()
        }


def reset_stats() -> None:
    with _stats_lock:
        _function_stats.clear()


__all__ = [
    'ENABLE_PROFILING',
    'configure',
    'init_profiling',
    'profile_function',
    'get_function_stats',
    'reset_stats',
]
