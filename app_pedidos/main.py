# ==============================================================================
# APLICACIÓN FLASK - Rutas de la tienda y del panel de administración
# ==============================================================================
# Las rutas solo traducen HTTP ↔ servicios. Toda la lógica de negocio vive
# en services/ y se obtiene del contenedor de dependencias.
# ==============================================================================

from flask import Flask, request, session, make_response, Response
from functools import wraps
import os
import uuid

from app_pedidos import config

# Sistema de profiling interno
from app_pedidos.performance_logger import init_profiling

# ═══════════════════════════════════════════════════════════════════════════
# CONTENEDOR DE DEPENDENCIAS - Servicios y Repositorios
# ═══════════════════════════════════════════════════════════════════════════
from app_pedidos.app_container import get_container
from app_pedidos.services.image_service import ImageServiceError
from app_pedidos.services.order_filters import FILTER_COOKIE, FILTER_LABELS, parse_mode
from app_pedidos.services.ticket_service import render_ticket

app = Flask(__name__)

# ═══════════════════════════════════════════════════════════════════════════
# INICIALIZAR SISTEMA DE PROFILING
# ═══════════════════════════════════════════════════════════════════════════
# Mide rendimiento de rutas y funciones. Logs en logs/
init_profiling(app)

# ═══════════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN DE SESIONES
# ═══════════════════════════════════════════════════════════════════════════════
if config.PRODUCTION_MODE and not config.SECRET_KEY:
    print("[ADVERTENCIA] PRODUCTION_MODE activo sin PEDIDOS_SECRET_KEY definida")
    print("[ADVERTENCIA] Define la variable de entorno para mayor seguridad")

app.secret_key = config.SECRET_KEY or config.DEFAULT_SECRET

app.config.update(
    SESSION_COOKIE_HTTPONLY=True,      # Protege contra XSS
    SESSION_COOKIE_SECURE=False,       # True solo detrás de HTTPS
    SESSION_COOKIE_SAMESITE='Lax',     # Protección CSRF básica
    PERMANENT_SESSION_LIFETIME=config.SESSION_LIFETIME_SECONDS,
    MAX_CONTENT_LENGTH=config.MAX_UPLOAD_BYTES,
)

FILTER_COOKIE_MAX_AGE = 365 * 24 * 3600


def container():
    return get_container()


def current_settings():
    """Estado de la tienda para esta petición (se pasa a los servicios)."""
    return container().shop_service.get_settings()


def admin_user() -> str:
    """Etiqueta de la sesión de administrador para auditoría."""
    uid = session.get('admin_uid', '')
    return f"admin:{uid[:5]}" if uid else 'sistema'


def customer_id() -> str:
    """ID anónimo del cliente (se crea en su primera visita)."""
    if 'customer_id' not in session:
        session['customer_id'] = uuid.uuid4().hex
    return session['customer_id']


def as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or '').strip().lower() in ('1', 'true', 'si', 'sí', 'on', 'yes')


def json_body():
    """Cuerpo JSON o formulario como dict."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def error_status(result, default=400):
    """Código HTTP de un resultado fallido ('no encontrado' → 404)."""
    if 'no encontrad' in (result.get('error') or '').lower():
        return 404
    return default


# ═══════════════════════════════════════════════════════════════════════════════
# SEGURIDAD: CSRF, SESIÓN DE ADMINISTRADOR Y CABECERAS
# ═══════════════════════════════════════════════════════════════════════════════

def generate_csrf_token():
    if 'csrf_token' not in session:
        session['csrf_token'] = uuid.uuid4().hex
    return session['csrf_token']


def verify_csrf(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if request.method in ('POST', 'PUT', 'PATCH', 'DELETE'):
            token = session.get('csrf_token')
            form_token = (
                request.form.get('csrf_token') or
                request.headers.get('X-CSRF-Token') or
                request.headers.get('X-CSRFToken')
            )
            if not form_token and request.is_json:
                json_data = request.get_json(silent=True) or {}
                form_token = json_data.get('csrf_token')

            if not token or not form_token or token != form_token:
                return {"ok": False, "error": "CSRF token inválido"}, 403
        return f(*args, **kwargs)
    return wrapper


def admin_required(f):
    """La sola presencia de una sesión anónima de administrador autoriza."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        if 'admin_uid' not in session:
            return {"ok": False, "error": "Debes iniciar sesión."}, 401
        return f(*args, **kwargs)
    return wrapper


@app.after_request
def set_security_headers(response):
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
    response.headers['Permissions-Policy'] = 'geolocation=(), microphone=()'
    if request.is_secure:
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    return response


@app.errorhandler(413)
def request_too_large(error):
    limit_mb = config.MAX_UPLOAD_BYTES // (1024 * 1024)
    return {"ok": False, "error": f"El archivo supera el límite de {limit_mb} MB"}, 413


@app.route('/logs/<path:filename>')
@app.route('/storage/<path:filename>')
def block_sensitive_routes(filename):
    """Bloquea acceso a carpetas de logs y datos."""
    return "Not Found", 404


@app.route("/api/csrf", methods=["GET"])
def api_csrf():
    return {"ok": True, "csrf_token": generate_csrf_token()}


# ═══════════════════════════════════════════════════════════════════════════
# API: TIENDA (menú y estado)
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/api/menu", methods=["GET"])
def api_menu():
    """Menú público: productos, categorías y si la tienda recibe pedidos."""
    catalog = container().catalog_service
    settings = current_settings()
    customer_id()
    return {
        "ok": True,
        "is_open": settings.is_open,
        "categories": [{"id": c.id, "name": c.name} for c in catalog.list_categories()],
        "products": catalog.list_products(request.args.get('category') or None),
    }


# ═══════════════════════════════════════════════════════════════════════════
# API: CARRITO (session-based)
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/api/carrito", methods=["GET"])
def api_carrito_ver():
    """Ver contenido actual del carrito (vacío si la tienda está cerrada)."""
    cart = container().cart_service.get_cart(current_settings())
    return {"ok": True, "carrito": cart}


@app.route("/api/carrito/agregar", methods=["POST"])
@verify_csrf
def api_carrito_agregar():
    """Agrega una unidad de un producto. Espera JSON con product_id."""
    data = json_body()
    result = container().cart_service.add_item(data.get("product_id"), current_settings())
    if not result['ok']:
        return result, error_status(result, 409 if 'cerrada' in result['error'] else 400)
    return result


@app.route("/api/carrito/eliminar", methods=["POST"])
@verify_csrf
def api_carrito_eliminar():
    data = json_body()
    result = container().cart_service.remove_item(data.get("product_id"), current_settings())
    if not result['ok']:
        return result, 409 if 'cerrada' in result['error'] else 400
    return result


@app.route("/api/carrito/cantidad", methods=["POST"])
@verify_csrf
def api_carrito_cantidad():
    """Cambia la cantidad de una línea (0 o menos la elimina)."""
    data = json_body()
    result = container().cart_service.update_quantity(
        data.get("product_id"), data.get("quantity"), current_settings()
    )
    if not result['ok']:
        return result, 409 if 'cerrada' in result['error'] else 400
    return result


@app.route("/api/carrito/limpiar", methods=["POST"])
@verify_csrf
def api_carrito_limpiar():
    container().cart_service.clear()
    return {"ok": True, "mensaje": "Carrito vaciado"}


@app.route("/api/checkout", methods=["POST"])
@verify_csrf
def api_checkout():
    """
    Envía el pedido del carrito.
    Espera name, phone, address, payment_method y notes (opcional).
    """
    c = container()
    data = json_body()
    settings = current_settings()
    cart = c.cart_service.load(settings)
    result = c.order_service.checkout(
        cart,
        {'name': data.get('name'), 'phone': data.get('phone'), 'address': data.get('address')},
        data.get('payment_method'),
        settings,
        customer_id(),
        notes=data.get('notes') or ''
    )
    if not result['ok']:
        return result, 400
    c.cart_service.save(cart, settings)
    return result, 201


# ═══════════════════════════════════════════════════════════════════════════
# API: SESIÓN DE ADMINISTRADOR
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/api/admin/login", methods=["POST"])
@verify_csrf
def api_admin_login():
    """Inicio de sesión anónimo: crea un uid aleatorio para la sesión."""
    if 'admin_uid' not in session:
        session.permanent = True
        session['admin_uid'] = uuid.uuid4().hex
        container().audit_service.log_session(admin_user(), 'inicio de sesión')
    return {"ok": True, "uid": session['admin_uid'], "csrf_token": generate_csrf_token()}


@app.route("/api/admin/logout", methods=["POST"])
@admin_required
@verify_csrf
def api_admin_logout():
    c = container()
    uid = session.pop('admin_uid')
    c.boards.close(uid)
    c.notification_service.forget(uid)
    session.pop('notifications_granted', None)
    c.audit_service.log_session(f"admin:{uid[:5]}", 'cierre de sesión')
    return {"ok": True}


# ═══════════════════════════════════════════════════════════════════════════
# API: PANEL Y PEDIDOS
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/api/admin/dashboard", methods=["GET"])
@admin_required
def api_admin_dashboard():
    """Métricas recalculadas sobre todos los pedidos en cada consulta."""
    stats = container().stats_service.compute(current_settings())
    return {"ok": True, **stats}


@app.route("/api/admin/orders", methods=["GET"])
@admin_required
def api_admin_orders():
    """
    Tablero kanban filtrado. El filtro viene de ?filter= o de la cookie
    order_filter, y se guarda en la cookie para la próxima visita.
    """
    c = container()
    mode = parse_mode(request.args.get('filter') or request.cookies.get(FILTER_COOKIE))
    board = c.boards.get(session['admin_uid'], admin_user())
    view = board.columns(mode, current_settings())

    response = make_response({
        "ok": True,
        **view,
        "filter_label": FILTER_LABELS[mode],
        "write_errors": board.pop_errors(),
    })
    response.set_cookie(FILTER_COOKIE, mode.value, max_age=FILTER_COOKIE_MAX_AGE, samesite='Lax')
    return response


@app.route("/api/admin/orders/<order_id>/status", methods=["POST"])
@admin_required
@verify_csrf
def api_admin_order_status(order_id):
    """Avanza o retrocede un pedido (cambio optimista, escritura en 2º plano)."""
    data = json_body()
    board = container().boards.get(session['admin_uid'], admin_user())
    result = board.advance(order_id, data.get('status'))
    if not result['ok']:
        return result, error_status(result, 409)
    return result


@app.route("/api/admin/orders/<order_id>/ticket", methods=["GET"])
@admin_required
def api_admin_order_ticket(order_id):
    order = container().order_service.get_order(order_id)
    if order is None:
        return {"ok": False, "error": "Pedido no encontrado"}, 404
    return Response(render_ticket(order), mimetype='text/plain; charset=utf-8')


@app.route("/api/admin/notifications", methods=["GET"])
@admin_required
def api_admin_notifications():
    """Campana: pedidos pendientes y notificaciones de pedidos nuevos."""
    c = container()
    result = c.notification_service.poll(
        c.order_service.list_orders(),
        session['admin_uid'],
        session.get('notifications_granted', False)
    )
    return {"ok": True, **result}


@app.route("/api/admin/notifications/permission", methods=["POST"])
@admin_required
@verify_csrf
def api_admin_notifications_permission():
    granted = as_bool(json_body().get('granted'))
    session['notifications_granted'] = granted
    if granted:
        return {"ok": True, "granted": True,
                "message": "Recibirás notificaciones de nuevos pedidos."}
    return {"ok": True, "granted": False,
            "message": "No recibirás notificaciones. Puedes cambiarlo en la configuración de tu navegador."}


@app.route("/api/admin/audit", methods=["GET"])
@admin_required
def api_admin_audit():
    logs = container().audit_service.get_logs(request.args.get('type') or None)
    return {"ok": True, "logs": logs}


# ═══════════════════════════════════════════════════════════════════════════
# API: CATÁLOGO
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/api/admin/products", methods=["GET", "POST"])
@admin_required
@verify_csrf
def api_admin_products():
    catalog = container().catalog_service
    if request.method == "POST":
        result = catalog.save_product(json_body(), user=admin_user())
        if not result['ok']:
            return result, 400
        return result, 201
    return {"ok": True, "products": catalog.list_products(request.args.get('category') or None)}


@app.route("/api/admin/products/<product_id>", methods=["GET", "PUT", "DELETE"])
@admin_required
@verify_csrf
def api_admin_product(product_id):
    catalog = container().catalog_service
    if request.method == "PUT":
        result = catalog.save_product(json_body(), product_id=product_id, user=admin_user())
        if not result['ok']:
            return result, error_status(result)
        return result
    if request.method == "DELETE":
        result = catalog.delete_product(product_id, user=admin_user())
        if not result['ok']:
            return result, 404
        return result
    product = catalog.get_product(product_id)
    if product is None:
        return {"ok": False, "error": "Producto no encontrado"}, 404
    return {"ok": True, "product": product}


@app.route("/api/admin/categories", methods=["GET", "POST"])
@admin_required
@verify_csrf
def api_admin_categories():
    catalog = container().catalog_service
    if request.method == "POST":
        result = catalog.create_category(json_body().get('name'), user=admin_user())
        if not result['ok']:
            return result, 400
        return result, 201
    return {"ok": True, "categories": [{"id": c.id, "name": c.name} for c in catalog.list_categories()]}


@app.route("/api/admin/categories/<category_id>", methods=["PUT", "DELETE"])
@admin_required
@verify_csrf
def api_admin_category(category_id):
    catalog = container().catalog_service
    if request.method == "DELETE":
        result = catalog.delete_category(category_id, user=admin_user())
        if not result['ok']:
            return result, 409 if result.get('in_use') else 404
        return result
    result = catalog.rename_category(category_id, json_body().get('name'), user=admin_user())
    if not result['ok']:
        return result, error_status(result)
    return result


@app.route("/api/admin/catalog/reset", methods=["POST"])
@admin_required
@verify_csrf
def api_admin_catalog_reset():
    """Restablece el menú desde el catálogo base (requiere confirm=true)."""
    confirm = as_bool(json_body().get('confirm'))
    result = container().catalog_service.reset_catalog(confirm=confirm, user=admin_user())
    if not result['ok']:
        return result, 400 if not confirm else 500
    return result


# ═══════════════════════════════════════════════════════════════════════════
# API: TIENDA ABIERTA / CERRADA
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/api/admin/settings/shop", methods=["GET", "POST"])
@admin_required
@verify_csrf
def api_admin_shop_settings():
    shop = container().shop_service
    if request.method == "POST":
        data = json_body()
        if 'is_open' not in data:
            return {"ok": False, "error": "Falta el campo is_open"}, 400
        return shop.set_open(as_bool(data.get('is_open')), user=admin_user())
    return {"ok": True, "settings": shop.get_settings().to_dict()}


# ═══════════════════════════════════════════════════════════════════════════
# API: IMÁGENES
# ═══════════════════════════════════════════════════════════════════════════

@app.route("/api/admin/images/upload", methods=["POST"])
@admin_required
@verify_csrf
def api_admin_image_upload():
    """Sube el archivo del campo 'image' y devuelve su URL pública."""
    try:
        image_url = container().image_service.upload(request.files.get('image'))
    except ValueError as e:
        return {"ok": False, "error": str(e)}, 400
    except ImageServiceError as e:
        return {"ok": False, "error": str(e)}, 502
    return {"ok": True, "image_url": image_url}


@app.route("/api/admin/images/sign", methods=["GET"])
@admin_required
def api_admin_image_sign():
    try:
        signed = container().image_service.sign_upload()
    except ImageServiceError as e:
        return {"ok": False, "error": str(e)}, 502
    return {"ok": True, **signed}


@app.route("/api/admin/images/generate", methods=["POST"])
@admin_required
@verify_csrf
def api_admin_image_generate():
    """Genera la foto del producto con IA (data URI)."""
    try:
        image_url = container().image_service.generate_product_image(json_body().get('product_name'))
    except ValueError as e:
        return {"ok": False, "error": str(e)}, 400
    except ImageServiceError as e:
        return {"ok": False, "error": str(e)}, 502
    return {"ok": True, "image_url": image_url}


if __name__ == "__main__":
    # En producción usar WSGI (gunicorn, waitress, etc.)
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
    PORT = int(os.environ.get('FLASK_PORT', 5000))

    if not DEBUG:
        print(f"\n{'='*50}")
        print(f"  Servidor iniciado en http://{HOST}:{PORT}")
        print(f"  Acceso local: http://localhost:{PORT}")
        print(f"{'='*50}\n")

    app.run(host=HOST, port=PORT, debug=DEBUG)
