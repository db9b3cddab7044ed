# ==============================================================================
# CONFIGURACIÓN DE LA APLICACIÓN
# ==============================================================================
# Todas las opciones se leen de variables de entorno con valores por defecto
# para desarrollo local. En producción definir al menos PEDIDOS_SECRET_KEY.
#
# Ejemplo:
#   export PEDIDOS_SECRET_KEY="clave_larga_y_aleatoria"
#   export PEDIDOS_DATA_DIR="/srv/pedidos/data"
#   export CLOUDINARY_CLOUD_NAME="mi-nube"
# ==============================================================================

import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _env_flag(name: str, default: bool) -> bool:
    """Lee una variable de entorno booleana ('1', 'true', 'si', 'on')."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'si', 'sí', 'on', 'yes')


# ═══════════════════════════════════════════════════════════════════════════════
# MODO PRODUCCIÓN Y SESIONES
# ═══════════════════════════════════════════════════════════════════════════════
PRODUCTION_MODE = _env_flag('PEDIDOS_PRODUCTION_MODE', False)

DEFAULT_SECRET = "app_pedidos_dev_secret_key_change_in_production"
SECRET_KEY = os.environ.get('PEDIDOS_SECRET_KEY')

SESSION_LIFETIME_SECONDS = 86400  # 24 horas

# ═══════════════════════════════════════════════════════════════════════════════
# RUTAS DE DATOS Y LOGS
# ═══════════════════════════════════════════════════════════════════════════════
# Cada colección del almacén de documentos vive en su propio archivo JSON
DATA_DIR = os.environ.get('PEDIDOS_DATA_DIR') or os.path.join(BASE_DIR, 'storage')
LOGS_DIR = os.environ.get('PEDIDOS_LOGS_DIR') or os.path.join(BASE_DIR, 'logs')

# Fixture del catálogo para "restablecer menú"
SEED_CATALOG_FILE = os.path.join(BASE_DIR, 'data', 'seed_catalog.json')

# ═══════════════════════════════════════════════════════════════════════════════
# PEDIDOS
# ═══════════════════════════════════════════════════════════════════════════════
# False = el tablero solo cambia el estado local (variante "DISABLED FOR DEMO")
PERSIST_STATUS_WRITES = _env_flag('PEDIDOS_PERSIST_STATUS_WRITES', True)

SHOP_NAME = os.environ.get('PEDIDOS_SHOP_NAME', 'La Perrada de William')

# ═══════════════════════════════════════════════════════════════════════════════
# IMÁGENES (Cloudinary + generación por IA)
# ═══════════════════════════════════════════════════════════════════════════════
CLOUDINARY_CLOUD_NAME = os.environ.get('CLOUDINARY_CLOUD_NAME', '')
CLOUDINARY_UPLOAD_PRESET = os.environ.get('CLOUDINARY_UPLOAD_PRESET', '')
CLOUDINARY_API_KEY = os.environ.get('CLOUDINARY_API_KEY', '')
CLOUDINARY_API_SECRET = os.environ.get('CLOUDINARY_API_SECRET', '')

GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY', '')
IMAGE_MODEL = os.environ.get('PEDIDOS_IMAGE_MODEL', 'imagen-4.0-fast-generate-001')

ALLOWED_IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}
MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5 MB

# Timeout (segundos) de las llamadas HTTP a proveedores externos
HTTP_TIMEOUT = 30

PLACEHOLDER_IMAGE_URL = 'https://picsum.photos/seed/new/600/400'
PLACEHOLDER_IMAGE_HINT = 'food placeholder'

# ═══════════════════════════════════════════════════════════════════════════════
# INSTRUCCIONES DE PAGO (página de confirmación)
# ═══════════════════════════════════════════════════════════════════════════════
TRANSFER_ACCOUNTS = [
    {'bank': 'Bancolombia Ahorros', 'number': '569-1234567-89'},
    {'bank': 'Nequi', 'number': '316-123-4567'},
]
