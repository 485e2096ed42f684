# Standard library imports
import atexit
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

# Third-party imports
from decouple import config
from dotenv import load_dotenv
from flask import Flask, request, jsonify, session

# Local/application imports
from bhojan.core.bookings import BookingService
from bhojan.core.cart import ShoppingCart
from bhojan.core.config import ADMIN_COOKIE_NAME, RESTAURANT_NAME, Settings
from bhojan.core.contact import ContactService
from bhojan.core.enums import ErrorKind
from bhojan.core.errors import Result
from bhojan.core.menu_handler import MenuCatalogue, filter_items, localized
from bhojan.core.session import AdminSessionManager, now_ms
from bhojan.core.store import InMemoryBookingStore
from bhojan.core.validation import validate_admin_login, validate_customer_info, validate_quantity
from bhojan.core.whatsapp import build_whatsapp_order
from bhojan.utils.dispatch import NotificationDispatcher
from bhojan.utils.email import EmailNotifier
from bhojan.utils.logging import configure_logging

# Load environment variables
load_dotenv()

HOST = '0.0.0.0'

logger = logging.getLogger(__name__)

STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFIGURATION: 500,
    ErrorKind.DEPENDENCY: 500,
}

def respond(result: Result, data=None):
    """Turn a Result into a JSON response with a matching status code"""
    if result.success:
        return jsonify({'success': True, 'data': data})
    return jsonify(result.to_dict()), STATUS_CODES.get(result.kind, 400)

def get_payload():
    if request.is_json:
        return request.get_json(silent=True)
    return request.form.to_dict()

def get_fields() -> dict:
    payload = get_payload()
    return payload if isinstance(payload, dict) else {}

def create_app(settings: Optional[Settings] = None, booking_store=None, notifier=None,
               dispatcher: Optional[NotificationDispatcher] = None, clock=None) -> Flask:
    settings = settings or Settings.from_env()

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
    app.config['SESSION_COOKIE_SECURE'] = settings.is_production

    # Initialize services
    sessions = AdminSessionManager(settings, clock=clock or now_ms)
    notifier = notifier or EmailNotifier(settings)
    if dispatcher is None:
        dispatcher = NotificationDispatcher(ThreadPoolExecutor(max_workers=2))
        # Let queued e-mails finish when the worker exits
        atexit.register(dispatcher.shutdown)
    booking_service = BookingService(booking_store or InMemoryBookingStore(), notifier, dispatcher, sessions)
    contact_service = ContactService(notifier, dispatcher)
    catalogue = MenuCatalogue(settings.menu_file)

    def admin_token():
        return request.cookies.get(ADMIN_COOKIE_NAME)

    def current_cart() -> ShoppingCart:
        return ShoppingCart(session)

    @app.route('/')
    def home():
        return jsonify({
            'name': RESTAURANT_NAME,
            'phone': settings.restaurant_phone,
            'whatsapp': settings.restaurant_whatsapp,
            'email': settings.restaurant_email,
        })

    @app.route('/health')
    def health_check():
        return 'OK', 200

    # -------- Menu --------
    @app.route('/api/menu', methods=['GET'])
    def list_menu():
        result = catalogue.get_menu_items()
        if not result.success:
            return respond(result)
        items = filter_items(
            result.data,
            category=request.args.get('category', 'all'),
            dietary=request.args.get('dietary', 'all'),
            query=request.args.get('q', ''),
        )
        locale = request.args.get('locale', 'en')
        return respond(result, [localized(item, locale) for item in items])

    @app.route('/api/admin/menu', methods=['PUT'])
    def update_menu():
        if not sessions.verify(admin_token()):
            return respond(Result.fail('Authentication required', ErrorKind.AUTHENTICATION))
        payload = get_payload()
        items = payload.get('menuItems') if isinstance(payload, dict) else payload
        return respond(catalogue.update_menu_items(items))

    # -------- Cart --------
    @app.route('/api/cart', methods=['GET'])
    def get_cart():
        return respond(Result.ok(), current_cart().to_dict())

    @app.route('/api/cart', methods=['DELETE'])
    def clear_cart():
        cart = current_cart()
        cart.clear()
        return respond(Result.ok(), cart.to_dict())

    @app.route('/api/cart/items', methods=['POST'])
    def add_to_cart():
        payload = get_fields()
        product_id = payload.get('product_id') or payload.get('menuItemId')
        if not product_id:
            return respond(Result.fail('Product id is required'))

        item = catalogue.get_item(str(product_id))
        if item is None or not item.is_available:
            return respond(Result.fail('Menu item not available', ErrorKind.NOT_FOUND))

        cart = current_cart()
        cart.add_item(item.to_cart_item())
        return respond(Result.ok(), cart.to_dict())

    @app.route('/api/cart/items/<product_id>', methods=['PATCH'])
    def update_cart_item(product_id):
        validation = validate_quantity(get_fields().get('quantity'))
        if not validation.success:
            return respond(validation)
        cart = current_cart()
        cart.update_quantity(product_id, validation.data)
        return respond(Result.ok(), cart.to_dict())

    @app.route('/api/cart/items/<product_id>', methods=['DELETE'])
    def remove_cart_item(product_id):
        cart = current_cart()
        cart.remove_item(product_id)
        return respond(Result.ok(), cart.to_dict())

    @app.route('/api/cart/checkout', methods=['POST'])
    def checkout():
        cart = current_cart()
        if cart.is_empty():
            return respond(Result.fail('Your cart is empty! Please add items before checking out.'))

        validation = validate_customer_info(get_payload())
        if not validation.success:
            return respond(validation)

        order = build_whatsapp_order(cart.items, validation.data, settings.restaurant_whatsapp)
        cart.clear()
        return respond(Result.ok(), order.to_dict())

    # -------- Bookings & contact --------
    @app.route('/api/bookings', methods=['POST'])
    def create_booking():
        result = booking_service.create_booking(get_payload())
        if not result.success:
            return respond(result)
        return respond(result, result.data.to_dict()), 201

    @app.route('/api/admin/bookings', methods=['GET'])
    def list_bookings():
        result = booking_service.get_bookings(admin_token())
        if not result.success:
            return respond(result)
        return respond(result, [booking.to_dict() for booking in result.data])

    @app.route('/api/admin/bookings/<booking_id>', methods=['PATCH'])
    def update_booking(booking_id):
        payload = get_fields()
        result = booking_service.update_booking_status(booking_id, payload.get('status'), admin_token())
        if not result.success:
            return respond(result)
        return respond(result, result.data.to_dict())

    @app.route('/api/contact', methods=['POST'])
    def contact():
        return respond(contact_service.send_contact_message(get_payload()))

    # -------- Admin session --------
    @app.route('/api/admin/login', methods=['POST'])
    def admin_login():
        validation = validate_admin_login(get_payload())
        if not validation.success:
            return respond(validation)

        result = sessions.authenticate(validation.data.password)
        if not result.success:
            return respond(result)

        response = respond(result, result.data)
        sessions.set_cookie(response, result.data)
        return response

    @app.route('/api/admin/logout', methods=['POST'])
    def admin_logout():
        response = jsonify({'success': True, 'data': None})
        sessions.logout(response)
        return response

    @app.route('/api/admin/session', methods=['GET'])
    def admin_session():
        return respond(Result.ok(), {'authenticated': sessions.verify(admin_token())})

    logger.info(f"=== {RESTAURANT_NAME} application ready ===")
    return app

settings = Settings.from_env()
configure_logging(settings.log_level, settings.log_dir)
app = create_app(settings)

if __name__ == '__main__':
    app.run(host=HOST, port=config('PORT', default=10000, cast=int), debug=not settings.is_production)
