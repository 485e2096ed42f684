from .cart import ShoppingCart, CartItem
from .session import AdminSessionManager
from .bookings import BookingService
from .contact import ContactService
from .menu_handler import MenuCatalogue

__all__ = ['ShoppingCart', 'CartItem', 'AdminSessionManager', 'BookingService', 'ContactService', 'MenuCatalogue']
