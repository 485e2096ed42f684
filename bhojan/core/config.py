from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from decouple import config

RESTAURANT_NAME = 'Bihar Bhojan'

TAX_RATE = Decimal('0.05')
COUNTRY_CODE = '91'
WHATSAPP_BASE_URL = 'https://wa.me'
PAYMENT_METHOD = 'Cash on Delivery'

CART_SESSION_KEY = 'cart'

# Admin session
ADMIN_COOKIE_NAME = 'admin_session'
SESSION_DURATION_MS = 24 * 60 * 60 * 1000
SESSION_MAX_AGE = SESSION_DURATION_MS // 1000

MENU_CATEGORIES = ('thali', 'ghar-ka-khana', 'street-delights', 'mithai', 'sattu-specials')
SPICE_LEVELS = ('mild', 'medium', 'hot')

# Fuzzy search threshold for menu lookups
FUZZY_MATCH_THRESHOLD = 80


def _optional(name: str) -> Optional[str]:
    value = config(name, default='')
    return value or None


@dataclass
class Settings:
    admin_password: Optional[str] = None
    jwt_secret: Optional[str] = None
    secret_key: str = 'dev-secret-key'
    env: str = 'development'
    restaurant_whatsapp: str = '1234567890'
    restaurant_phone: str = '+91 1234567890'
    restaurant_email: str = 'info@biharbhojan.com'
    from_email: str = 'onboarding@resend.dev'
    resend_api_key: Optional[str] = None
    base_url: str = 'http://localhost:3000'
    email_timeout: float = 10.0
    menu_file: str = 'data/menu.json'
    log_level: str = 'INFO'
    log_dir: str = 'logs'

    @property
    def is_production(self) -> bool:
        return self.env == 'production'

    @classmethod
    def from_env(cls) -> 'Settings':
        """Build settings from the environment (and .env, via decouple)"""
        return cls(
            admin_password=_optional('ADMIN_PASSWORD'),
            jwt_secret=_optional('JWT_SECRET'),
            secret_key=config('SECRET_KEY', default='dev-secret-key'),
            env=config('ENV', default='development'),
            restaurant_whatsapp=config('RESTAURANT_WHATSAPP', default='1234567890'),
            restaurant_phone=config('RESTAURANT_PHONE', default='+91 1234567890'),
            restaurant_email=config('RESTAURANT_EMAIL', default='info@biharbhojan.com'),
            from_email=config('FROM_EMAIL', default='onboarding@resend.dev'),
            resend_api_key=_optional('RESEND_API_KEY'),
            base_url=config('BASE_URL', default='http://localhost:3000'),
            email_timeout=config('EMAIL_TIMEOUT', default=10.0, cast=float),
            menu_file=config('MENU_FILE', default='data/menu.json'),
            log_level=config('LOG_LEVEL', default='INFO'),
            log_dir=config('LOG_DIR', default='logs'),
        )
