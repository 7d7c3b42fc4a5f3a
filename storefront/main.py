# ==============================================================================
# APLICACIÓN WEB - Tienda (API JSON)
# ==============================================================================
# Las rutas solo traducen HTTP ↔ servicios. Toda la lógica vive en services/.
#
#   Lecturas    → QueryResult.to_dict()  {data, isLoading, error, isStale, updatedAt}
#   Escrituras  → dict de resultado      {ok, data, toast, error}
#
# El código HTTP de una escritura fallida sale de ERROR_STATUS.
# ==============================================================================

import os
from functools import wraps

from flask import Blueprint, Flask, g, request, session

# Sistema de profiling interno
from storefront.performance_logger import init_profiling

# ═══════════════════════════════════════════════════════════════════════════
# CONTENEDOR DE DEPENDENCIAS - Servicios y Repositorios
# ═══════════════════════════════════════════════════════════════════════════
from storefront.app_container import get_container
from storefront.services import ERROR_STATUS, SessionContext
from storefront.services.auth_service import SESSION_ADMIN


# ═══════════════════════════════════════════════════════════════════════════════
# MODO PRODUCCIÓN
# ═══════════════════════════════════════════════════════════════════════════════
# True = cookies seguras y sin mensajes de depuración
# False = Modo desarrollo
PRODUCTION_MODE = os.environ.get('STOREFRONT_PRODUCTION', '0') == '1'

# SECRET_KEY: En producción DEBE definirse via variable de entorno
# Comando: export STOREFRONT_SECRET_KEY="tu_clave_secreta_muy_larga_y_aleatoria"
_DEFAULT_SECRET = "storefront_dev_secret_key_change_in_production"


api = Blueprint('api', __name__, url_prefix='/api')


# ═══════════════════════════════════════════════════════════════════════════════
# UTILIDADES DE RUTAS
# ═══════════════════════════════════════════════════════════════════════════════

def container():
    return g.container


def current_user():
    ctx = getattr(g, 'session_ctx', None)
    return ctx.user if ctx else None


def to_int(v, default=None):
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def to_bool(v):
    if v is None:
        return None
    return str(v).strip().lower() in ('1', 'true', 'yes', 'on')


def json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def respond(result):
    """Dict de resultado → respuesta con el código HTTP del error."""
    if result['ok']:
        return result, 200
    return result, ERROR_STATUS.get(result['error'], 400)


def query_response(query_result):
    """Lectura → respuesta. Sin datos y con error: 500."""
    body = query_result.to_dict()
    if query_result.error and query_result.data is None:
        return body, 500
    return body, 200


def _denied(code, message, status):
    return {"ok": False, "data": None, "toast": None, "error": code, "message": message}, status


def login_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if current_user() is None:
            return _denied('auth_required', '로그인이 필요합니다', 401)
        return f(*args, **kwargs)
    return wrapper


def is_admin():
    return container().auth_service.admin_status(session, current_user())


def admin_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not is_admin():
            return _denied('forbidden', '관리자 권한이 필요합니다', 403)
        return f(*args, **kwargs)
    return wrapper


def self_or_admin(user_id):
    """Solo el propio usuario (o un administrador) ve sus datos."""
    user = current_user()
    return is_admin() or (user is not None and user.id == user_id)


# ═══════════════════════════════════════════════════════════════════════════════
# SESIÓN
# ═══════════════════════════════════════════════════════════════════════════════

@api.route('/auth/register', methods=['POST'])
def auth_register():
    data = json_body()
    result = container().auth_service.register(
        data.get('username'),
        data.get('password'),
        email=data.get('email', ''),
        first_name=data.get('first_name', ''),
        last_name=data.get('last_name', ''),
    )
    return respond(result)


@api.route('/auth/login', methods=['POST'])
def auth_login():
    data = json_body()
    ctx = g.session_ctx
    if not ctx.login(container().auth_service, session, data.get('username'), data.get('password')):
        return _denied('validation', '아이디 또는 비밀번호가 올바르지 않습니다.', 401)
    return {"ok": True, "user": ctx.user.to_session_dict(), "redirect": ctx.redirect_path}


@api.route('/auth/logout', methods=['POST'])
def auth_logout():
    g.session_ctx.logout(container().auth_service, session)
    return {"ok": True}


@api.route('/auth/me', methods=['GET'])
def auth_me():
    ctx = g.session_ctx
    return {
        "isAuthenticated": ctx.is_authenticated,
        "isLoading": ctx.is_loading,
        "user": ctx.user.to_session_dict() if ctx.user else None,
    }


@api.route('/admin/login', methods=['POST'])
def admin_login():
    data = json_body()
    user = container().auth_service.admin_login(data.get('username'), data.get('password'))
    if user is None:
        session.pop(SESSION_ADMIN, None)
        return _denied('forbidden', '관리자 인증에 실패했습니다.', 401)
    session[SESSION_ADMIN] = True
    return {"ok": True, "isAdmin": True}


@api.route('/admin/status', methods=['GET'])
def admin_status():
    return {"isAdmin": is_admin()}


# ═══════════════════════════════════════════════════════════════════════════════
# CATÁLOGO
# ═══════════════════════════════════════════════════════════════════════════════

@api.route('/products', methods=['GET'])
def products_list():
    args = request.args
    available = args.get('available')
    result = container().product_service.fetch_products(
        category_id=to_int(args.get('category_id')),
        featured=to_bool(args.get('featured')),
        available=True if available is None else to_bool(available),
        search=args.get('search'),
        limit=to_int(args.get('limit')),
        offset=to_int(args.get('offset'), 0) or 0,
    )
    return query_response(result)


@api.route('/products/search', methods=['GET'])
def products_search():
    return query_response(container().product_service.search_products(request.args.get('q', '')))


@api.route('/products/<int:product_id>', methods=['GET'])
def product_detail(product_id):
    result = container().product_service.fetch_product(product_id)
    if result.data is None and not result.error:
        return _denied('not_found', '상품을 찾을 수 없습니다', 404)
    return query_response(result)


@api.route('/categories', methods=['GET'])
def categories_list():
    return query_response(container().product_service.fetch_categories())


# ═══════════════════════════════════════════════════════════════════════════════
# CARRITO
# ═══════════════════════════════════════════════════════════════════════════════

@api.route('/cart', methods=['GET'])
@login_required
def cart_view():
    return query_response(container().cart_service.get_cart(current_user()))


@api.route('/cart/add', methods=['POST'])
def cart_add():
    # Sin login_required: el servicio responde con el toast de login
    data = json_body()
    product_id = to_int(data.get('product_id'))
    if product_id is None:
        return _denied('validation', 'ID de producto inválido', 400)
    quantity = to_int(data['quantity']) if 'quantity' in data else 1
    if quantity is None:
        return _denied('validation', '수량을 확인해주세요', 400)
    result = container().cart_service.add_item(
        current_user(), product_id, quantity, data.get('options')
    )
    return respond(result)


@api.route('/cart/<int:item_id>', methods=['PATCH'])
def cart_update(item_id):
    quantity = to_int(json_body().get('quantity'))
    if quantity is None:
        return _denied('validation', '수량을 확인해주세요', 400)
    return respond(container().cart_service.update_quantity(current_user(), item_id, quantity))


@api.route('/cart/<int:product_id>', methods=['DELETE'])
def cart_remove(product_id):
    return respond(container().cart_service.remove_item(current_user(), product_id))


@api.route('/cart/clear', methods=['POST'])
def cart_clear():
    return respond(container().cart_service.clear(current_user()))


# ═══════════════════════════════════════════════════════════════════════════════
# FAVORITOS
# ═══════════════════════════════════════════════════════════════════════════════

@api.route('/favorites', methods=['GET'])
@login_required
def favorites_list():
    return query_response(container().favorite_service.get_favorites(current_user()))


@api.route('/favorites/toggle', methods=['POST'])
def favorites_toggle():
    product_id = to_int(json_body().get('product_id'))
    if product_id is None:
        return _denied('validation', 'ID de producto inválido', 400)
    return respond(container().favorite_service.toggle_favorite(current_user(), product_id))


# ═══════════════════════════════════════════════════════════════════════════════
# RESEÑAS
# ═══════════════════════════════════════════════════════════════════════════════

@api.route('/products/<int:product_id>/reviews', methods=['GET'])
def reviews_list(product_id):
    return query_response(container().review_service.get_product_reviews(product_id))


@api.route('/products/<int:product_id>/reviews', methods=['POST'])
def reviews_create(product_id):
    data = json_body()
    result = container().review_service.submit_review(
        current_user(), product_id, data.get('rating'), data.get('content', '')
    )
    return respond(result)


@api.route('/reviews/<int:review_id>', methods=['PATCH'])
def reviews_update(review_id):
    data = json_body()
    result = container().review_service.update_review(
        current_user(), review_id, rating=data.get('rating'), content=data.get('content')
    )
    return respond(result)


@api.route('/reviews/<int:review_id>', methods=['DELETE'])
def reviews_delete(review_id):
    return respond(container().review_service.delete_review(current_user(), review_id))


# ═══════════════════════════════════════════════════════════════════════════════
# PEDIDOS
# ═══════════════════════════════════════════════════════════════════════════════

@api.route('/orders', methods=['GET'])
@login_required
def orders_list():
    return query_response(container().order_service.get_user_orders(current_user()))


@api.route('/orders/<int:order_id>', methods=['GET'])
@login_required
def order_detail(order_id):
    result = container().order_service.get_order(order_id)
    if result.data is None and not result.error:
        return _denied('not_found', '주문을 찾을 수 없습니다', 404)
    if result.data is not None and not self_or_admin(result.data.get('user_id')):
        return _denied('forbidden', '본인의 주문만 조회할 수 있습니다.', 403)
    return query_response(result)


@api.route('/orders', methods=['POST'])
def orders_create():
    data = json_body()
    result = container().order_service.place_order(
        current_user(),
        items=data.get('items'),
        shipping_address=data.get('shipping_address', ''),
        payment_method=data.get('payment_method', ''),
    )
    return respond(result)


@api.route('/orders/<int:order_id>/status', methods=['PATCH'])
@admin_required
def orders_update_status(order_id):
    status = json_body().get('status')
    return respond(container().order_service.update_status(order_id, status))


# ═══════════════════════════════════════════════════════════════════════════════
# NOTIFICACIONES
# ═══════════════════════════════════════════════════════════════════════════════

@api.route('/notifications/user/<int:user_id>', methods=['GET'])
@login_required
def notifications_list(user_id):
    if not self_or_admin(user_id):
        return _denied('forbidden', '권한이 없습니다', 403)
    return query_response(container().notification_service.get_notifications(user_id))


@api.route('/notifications', methods=['POST'])
@admin_required
def notifications_create():
    return respond(container().notification_service.create_notification(json_body()))


@api.route('/notifications/<int:notification_id>/read', methods=['PATCH'])
@login_required
def notifications_read(notification_id):
    return respond(container().notification_service.mark_as_read(notification_id, current_user()))


@api.route('/notifications/user/<int:user_id>/read-all', methods=['PATCH'])
@login_required
def notifications_read_all(user_id):
    if not self_or_admin(user_id):
        return _denied('forbidden', '권한이 없습니다', 403)
    return respond(container().notification_service.mark_all_as_read(user_id))


# ═══════════════════════════════════════════════════════════════════════════════
# ENVÍOS
# ═══════════════════════════════════════════════════════════════════════════════

@api.route('/delivery-tracking/<int:order_id>', methods=['GET'])
def delivery_get(order_id):
    return query_response(container().delivery_service.get_tracking(order_id))


@api.route('/delivery-tracking', methods=['GET'])
@admin_required
def delivery_list():
    return query_response(container().delivery_service.get_all_trackings())


@api.route('/delivery-tracking', methods=['POST'])
@admin_required
def delivery_create():
    return respond(container().delivery_service.create_tracking(json_body()))


@api.route('/delivery-tracking/<int:tracking_id>', methods=['PATCH'])
@admin_required
def delivery_update(tracking_id):
    return respond(container().delivery_service.update_tracking(tracking_id, json_body()))


# ═══════════════════════════════════════════════════════════════════════════════
# REEMBOLSOS
# ═══════════════════════════════════════════════════════════════════════════════

@api.route('/refund-requests/check/<int:order_id>', methods=['GET'])
def refund_check(order_id):
    return query_response(container().refund_service.check_request(order_id))


@api.route('/refund-requests/user/<int:user_id>', methods=['GET'])
@login_required
def refund_user_list(user_id):
    if not self_or_admin(user_id):
        return _denied('forbidden', '권한이 없습니다', 403)
    return query_response(container().refund_service.get_user_requests(user_id))


@api.route('/refund-requests', methods=['POST'])
def refund_create():
    data = json_body()
    order_id = to_int(data.get('order_id'))
    if order_id is None:
        return _denied('validation', '주문번호가 필요합니다.', 400)
    result = container().refund_service.create_request(
        current_user(), order_id, data.get('reason', ''), data.get('description', '')
    )
    return respond(result)


# ═══════════════════════════════════════════════════════════════════════════════
# FÁBRICA DE LA APLICACIÓN
# ═══════════════════════════════════════════════════════════════════════════════

def create_app(app_container=None):
    """
    Crea la aplicación Flask.

    Args:
        app_container: Contenedor ya construido (tests). Por defecto el global.
    """
    app = Flask(__name__)

    secret_key = os.environ.get("STOREFRONT_SECRET_KEY")
    if PRODUCTION_MODE and not secret_key:
        print("[ADVERTENCIA] PRODUCTION_MODE activo sin STOREFRONT_SECRET_KEY definida")
        print("[ADVERTENCIA] Define la variable de entorno para mayor seguridad")
    app.secret_key = secret_key or _DEFAULT_SECRET

    # Configuración de cookies de sesión
    app.config.update(
        SESSION_COOKIE_HTTPONLY=True,        # Protege contra XSS
        SESSION_COOKIE_SECURE=PRODUCTION_MODE,
        SESSION_COOKIE_SAMESITE='Lax',
        PERMANENT_SESSION_LIFETIME=86400,    # 24 horas
        MAX_CONTENT_LENGTH=1 * 1024 * 1024,
    )

    app_container = app_container or get_container(os.environ.get('STOREFRONT_DATA_DIR'))

    # Mide rendimiento de rutas y funciones. Logs en /logs/
    init_profiling(app)

    @app.before_request
    def load_session_context():
        g.container = app_container
        g.session_ctx = SessionContext.restore(app_container.auth_service, session)

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
        if request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    app.register_blueprint(api)
    return app


if __name__ == "__main__":
    # En producción usar WSGI (gunicorn: wsgi:app)
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
    PORT = int(os.environ.get('FLASK_PORT', 5000))

    if not DEBUG:
        print(f"\n{'='*50}")
        print(f"  Servidor iniciado en http://{HOST}:{PORT}")
        print(f"  Acceso local: http://localhost:{PORT}")
        print(f"{'='*50}\n")

    create_app().run(host=HOST, port=PORT, debug=DEBUG)
