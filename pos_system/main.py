from flask import Flask, request, session, jsonify, Response
from functools import wraps
from werkzeug.exceptions import RequestEntityTooLarge
import os
import uuid

# Sistema de profiling interno
from pos_system.performance_logger import init_profiling, log_error

# ═══════════════════════════════════════════════════════════════════════════
# CONTENEDOR DE DEPENDENCIAS - Servicios y Repositorios
# ═══════════════════════════════════════════════════════════════════════════
# Las rutas solo traducen HTTP <-> servicios. La lógica de negocio vive en
# services/ y el acceso a datos en repositories/.
# ═══════════════════════════════════════════════════════════════════════════
from pos_system.app_container import get_container
from pos_system.models import CURRENCIES, RECEIPT_LAYOUTS, VALID_UNITS, DEFAULT_UNIT
from pos_system.services import (
    PosError,
    ConfirmationRequiredError,
    NotFoundError,
    ValidationError,
    FramePrinter,
    render_receipt,
)

app = Flask(__name__)

# ═══════════════════════════════════════════════════════════════════════════
# INICIALIZAR SISTEMA DE PROFILING
# ═══════════════════════════════════════════════════════════════════════════
# Mide rendimiento de rutas y funciones. Logs en /logs/
# Para desactivar: POS_PROFILING=0
init_profiling(app)

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════
PRODUCTION_MODE = os.environ.get('POS_PRODUCTION_MODE', '0') == '1'

# SECRET_KEY: En producción DEBE definirse via variable de entorno
# Comando: export POS_SECRET_KEY="tu_clave_secreta_muy_larga_y_aleatoria"
_DEFAULT_SECRET = "pos_system_dev_secret_key_change_in_production"
_SECRET_KEY = os.environ.get("POS_SECRET_KEY")

if PRODUCTION_MODE and not _SECRET_KEY:
    print("[ADVERTENCIA] POS_PRODUCTION_MODE activo sin POS_SECRET_KEY definida")

app.secret_key = _SECRET_KEY or _DEFAULT_SECRET

# Cookies de sesión (la venta en curso viaja en la sesión)
app.config.update(
    SESSION_COOKIE_HTTPONLY=True,      # Protege contra XSS
    SESSION_COOKIE_SECURE=False,       # False para HTTP local (True solo para HTTPS)
    SESSION_COOKIE_SAMESITE='Lax',     # Protección CSRF básica
)

# Límite de subida (las imágenes se validan aparte a 2 MB)
app.config['MAX_CONTENT_LENGTH'] = 5 * 1024 * 1024  # 5 MB


@app.after_request
def set_security_headers(response):
    response.headers['X-Frame-Options'] = 'SAMEORIGIN'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
    response.headers['Permissions-Policy'] = 'geolocation=(), microphone=()'
    # HSTS solo con HTTPS real
    if request.is_secure:
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    return response


# ═══════════════════════════════════════════════════════════════════════════
# MANEJO DE ERRORES
# ═══════════════════════════════════════════════════════════════════════════

@app.errorhandler(PosError)
def handle_pos_error(error):
    payload = {'ok': False, 'error': str(error)}
    if isinstance(error, ConfirmationRequiredError):
        payload['confirm'] = True
    return jsonify(payload), error.status_code


@app.errorhandler(RequestEntityTooLarge)
def handle_too_large(error):
    return jsonify({'ok': False, 'error': 'El archivo es demasiado grande.'}), 413


@app.errorhandler(500)
def handle_internal_error(error):
    log_error(f"{request.method} {request.path}", getattr(error, 'original_exception', error))
    return jsonify({'ok': False, 'error': 'Error interno del servidor.'}), 500


# ═══════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def _payload():
    """Cuerpo del request: JSON o formulario."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def _is_confirmed(data=None):
    """confirm=1/true/yes en la query o en el cuerpo."""
    value = request.args.get('confirm')
    if value is None and data is not None:
        value = data.get('confirm')
    if isinstance(value, bool):
        return value
    return str(value or '').strip().lower() in ('1', 'true', 'yes', 'si', 'sí')


def _composer():
    return get_container().sale_composer(session)


def _html(document):
    return Response(document, mimetype='text/html')


# ═══════════════════════════════════════════════════════════════════════════
# CSRF
# ═══════════════════════════════════════════════════════════════════════════
# El token vive en la sesión; el cliente lo obtiene en GET /api/csrf y lo
# manda en X-CSRF-Token (o csrf_token en el formulario / JSON).

CSRF_METHODS = ('POST', 'PUT', 'DELETE')


def generate_csrf_token():
    if 'csrf_token' not in session:
        session['csrf_token'] = uuid.uuid4().hex
    return session['csrf_token']


def verify_csrf(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if request.method in CSRF_METHODS:
            token = session.get('csrf_token')
            form_token = (request.form.get('csrf_token') or request.headers.get('X-CSRF-Token') or request.headers.get('X-CSRFToken'))
            if not form_token and request.is_json:
                json_data = request.get_json(silent=True)
                if isinstance(json_data, dict):
                    form_token = json_data.get('csrf_token')
            if not token or not form_token or token != form_token:
                return jsonify({'ok': False, 'error': 'CSRF token inválido'}), 403
        return f(*args, **kwargs)
    return wrapper


@app.route('/api/csrf')
def api_csrf():
    return jsonify({'ok': True, 'csrf_token': generate_csrf_token()})


# ═══════════════════════════════════════════════════════════════════════════
# OPCIONES
# ═══════════════════════════════════════════════════════════════════════════

@app.route('/api/options')
def api_options():
    return jsonify({
        'ok': True,
        'units': list(VALID_UNITS),
        'defaultUnit': DEFAULT_UNIT,
        'currencies': CURRENCIES,
        'layouts': RECEIPT_LAYOUTS,
    })


# ═══════════════════════════════════════════════════════════════════════════
# CATEGORÍAS
# ═══════════════════════════════════════════════════════════════════════════

@app.route('/api/categories', methods=['GET', 'POST'])
@verify_csrf
def api_categories():
    service = get_container().category_service
    if request.method == 'POST':
        data = _payload()
        category = service.create(data.get('name'))
        return jsonify({'ok': True, 'category': category.to_dict()}), 201
    return jsonify({'ok': True, 'categories': [c.to_dict() for c in service.list()]})


@app.route('/api/categories/<category_id>', methods=['PUT', 'DELETE'])
@verify_csrf
def api_category(category_id):
    service = get_container().category_service
    data = _payload()
    if request.method == 'DELETE':
        category = service.delete(category_id, confirmed=_is_confirmed(data))
        return jsonify({'ok': True, 'deleted': category.to_dict()})
    category = service.update(category_id, data.get('name'))
    return jsonify({'ok': True, 'category': category.to_dict()})


# ═══════════════════════════════════════════════════════════════════════════
# ITEMS
# ═══════════════════════════════════════════════════════════════════════════

@app.route('/api/items', methods=['GET', 'POST'])
@verify_csrf
def api_items():
    service = get_container().item_service
    if request.method == 'POST':
        data = _payload()
        item = service.create(
            data.get('name'),
            data.get('price'),
            data.get('category'),
            data.get('unit') or DEFAULT_UNIT,
        )
        return jsonify({'ok': True, 'item': item.to_dict()}), 201
    items = service.search(request.args.get('q', ''))
    return jsonify({'ok': True, 'items': [i.to_dict() for i in items]})


@app.route('/api/items/<item_id>', methods=['PUT', 'DELETE'])
@verify_csrf
def api_item(item_id):
    service = get_container().item_service
    data = _payload()
    if request.method == 'DELETE':
        item = service.delete(item_id, confirmed=_is_confirmed(data))
        return jsonify({'ok': True, 'deleted': item.to_dict()})
    item = service.update(item_id, data)
    return jsonify({'ok': True, 'item': item.to_dict()})


# ═══════════════════════════════════════════════════════════════════════════
# VENTA EN CURSO
# ═══════════════════════════════════════════════════════════════════════════

@app.route('/api/sale')
def api_sale():
    composer = _composer()
    composer.consume_edit_request(request.args.get('editSale'))
    return jsonify({'ok': True, 'sale': composer.state()})


@app.route('/api/sale/suggestions')
def api_sale_suggestions():
    items = _composer().suggestions(request.args.get('q', ''))
    return jsonify({'ok': True, 'items': [i.to_dict() for i in items]})


@app.route('/api/sale/lookup', methods=['POST'])
@verify_csrf
def api_sale_lookup():
    item = _composer().enter_search(_payload().get('term', ''))
    return jsonify({'ok': True, 'item': item.to_dict() if item else None})


@app.route('/api/sale/items', methods=['POST'])
@verify_csrf
def api_sale_add():
    composer = _composer()
    data = _payload()
    quantity = data.get('quantity', 1)
    if data.get('item_id'):
        line = composer.add_item_by_id(data['item_id'], quantity)
    else:
        line = composer.enter_quantity(data.get('term', ''), quantity)
    return jsonify({
        'ok': True,
        'line': line.to_dict() if line else None,
        'sale': composer.state(),
    })


@app.route('/api/sale/items/<item_id>', methods=['PUT', 'DELETE'])
@verify_csrf
def api_sale_line(item_id):
    composer = _composer()
    if request.method == 'DELETE':
        composer.remove_line(item_id)
    else:
        composer.update_quantity(item_id, _payload().get('quantity'))
    return jsonify({'ok': True, 'sale': composer.state()})


@app.route('/api/sale/customer', methods=['POST'])
@verify_csrf
def api_sale_customer():
    composer = _composer()
    composer.set_customer_name(_payload().get('customerName', ''))
    return jsonify({'ok': True, 'sale': composer.state()})


@app.route('/api/sale/complete', methods=['POST'])
@verify_csrf
def api_sale_complete():
    sale = _composer().complete_sale()
    if sale is None:
        return jsonify({'ok': True, 'sale': None})
    print(f"[INFO] Venta registrada {sale.invoice_no} total {sale.total:.2f}")
    return jsonify({'ok': True, 'sale': sale.to_dict(), 'invoiceNo': sale.invoice_no})


@app.route('/api/sale/clear', methods=['POST'])
@verify_csrf
def api_sale_clear():
    composer = _composer()
    composer.clear()
    return jsonify({'ok': True, 'sale': composer.state()})


@app.route('/api/sale/receipt')
def api_sale_receipt():
    composer = _composer()
    current = composer.state()
    if not current['items']:
        raise ValidationError("La venta no tiene items.")
    settings = get_container().settings_service.get()
    return _html(render_receipt(current, settings))


# ═══════════════════════════════════════════════════════════════════════════
# HISTORIAL DE VENTAS
# ═══════════════════════════════════════════════════════════════════════════

@app.route('/api/sales')
def api_sales():
    sales = get_container().sales_history_service.search(request.args.get('q', ''))
    return jsonify({'ok': True, 'sales': [s.to_dict() for s in sales]})


@app.route('/api/sales/<sale_id>', methods=['GET', 'DELETE'])
@verify_csrf
def api_sale_record(sale_id):
    service = get_container().sales_history_service
    if request.method == 'DELETE':
        sale = service.delete(sale_id, confirmed=_is_confirmed(_payload()))
        return jsonify({'ok': True, 'deleted': sale.to_dict()})
    sale = service.get(sale_id)
    if sale is None:
        raise NotFoundError("Venta no encontrada.")
    return jsonify({'ok': True, 'sale': sale.to_dict()})


@app.route('/api/sales/<sale_id>/edit', methods=['POST'])
@verify_csrf
def api_sale_edit(sale_id):
    sale = get_container().sales_history_service.request_edit(sale_id, session)
    return jsonify({'ok': True, 'editSaleId': sale.id})


def _receipt_for(sale_id):
    container = get_container()
    sale = container.sales_history_service.get(sale_id)
    if sale is None:
        raise NotFoundError("Boleta no encontrada.")
    return render_receipt(sale, container.settings_service.get())


@app.route('/receipt/<sale_id>')
def receipt_page(sale_id):
    document = _receipt_for(sale_id)
    if request.args.get('autoprint') == '1':
        return _html(FramePrinter().print_document(document))
    return _html(document)


@app.route('/api/sales/<sale_id>/print', methods=['POST'])
@verify_csrf
def api_sale_print(sale_id):
    document = _receipt_for(sale_id)
    printer = get_container().printer
    result = printer.print_document(document)
    # Los errores de impresión solo quedan en logs/errors.log
    if isinstance(printer, FramePrinter):
        return jsonify({'ok': True, 'page': result})
    return jsonify({'ok': True, 'spooled': result is not None})


# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN DEL NEGOCIO
# ═══════════════════════════════════════════════════════════════════════════

@app.route('/api/settings', methods=['GET', 'POST'])
@verify_csrf
def api_settings():
    service = get_container().settings_service
    if request.method == 'POST':
        settings = service.save(_payload())
        return jsonify({'ok': True, 'settings': settings.to_dict()})
    return jsonify({'ok': True, 'settings': service.get().to_dict()})


@app.route('/api/settings/reset', methods=['POST'])
@verify_csrf
def api_settings_reset():
    settings = get_container().settings_service.reset(confirmed=_is_confirmed(_payload()))
    return jsonify({'ok': True, 'settings': settings.to_dict()})


@app.route('/api/settings/images/<field_name>', methods=['POST'])
@verify_csrf
def api_settings_image(field_name):
    data_url = get_container().settings_service.read_upload(field_name, request.files.get('file'))
    return jsonify({'ok': True, 'field': field_name, 'dataUrl': data_url})


if __name__ == "__main__":
    # Configuración para desarrollo local y acceso desde red WiFi
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
