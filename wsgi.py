# ==============================================================================
# WSGI Entry Point - Para Gunicorn en producción
# ==============================================================================
# Punto de entrada para servidores WSGI como Gunicorn.
#
# USO:
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
# ESTRUCTURA DEL PROYECTO:
#   repo_root/             <- Directorio de trabajo
#   ├── wsgi.py            <- Este archivo
#   ├── pyproject.toml
#   └── app_pedidos/       <- Paquete Python
#       ├── main.py
#       ├── services/
#       └── repositories/
#
# Variables de entorno útiles: PEDIDOS_SECRET_KEY, PEDIDOS_DATA_DIR,
# CLOUDINARY_CLOUD_NAME, GEMINI_API_KEY (ver app_pedidos/config.py)
# ==============================================================================

from app_pedidos.main import app

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
