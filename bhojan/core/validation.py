"""
Form validation schemas.

Each form is a pydantic model whose field validators carry the user-facing
message for the first rule a value breaks. The ``validate_*`` helpers turn a
raw payload into a ``Result`` holding either the coerced model or that first
message. Nothing here touches external state; "today" for booking dates comes
from the validation context when given.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_serializer,
    field_validator,
)

from bhojan.core.enums import ErrorKind
from bhojan.core.errors import Result

PHONE_PATTERN = re.compile(r'^[0-9]{10}$')
EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
TIME_PATTERN = re.compile(r'^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$')

MAX_PARTY_SIZE = 20

DateType = date


def _text(value: Any, required: str, label: str) -> str:
    if value is None or value == '':
        raise ValueError(required)
    if not isinstance(value, str):
        raise ValueError(f'{label} must be text')
    return value


def _length(value: str, minimum: int, maximum: int, label: str) -> str:
    if len(value) < minimum:
        raise ValueError(f'{label} must be at least {minimum} characters')
    if len(value) > maximum:
        raise ValueError(f'{label} must be less than {maximum} characters')
    return value


def name_rule(value: Any) -> str:
    name = _text(value, 'Name is required', 'Name')
    return _length(name, 2, 100, 'Name')


def email_rule(value: Any) -> str:
    email = _text(value, 'Email is required', 'Email')
    if not EMAIL_PATTERN.fullmatch(email):
        raise ValueError('Please enter a valid email address')
    return email


def phone_rule(value: Any) -> str:
    phone = _text(value, 'Phone number is required', 'Phone number')
    if not PHONE_PATTERN.fullmatch(phone):
        raise ValueError('Phone number must be 10 digits')
    return phone


Name = Annotated[str, BeforeValidator(name_rule)]
Email = Annotated[str, BeforeValidator(email_rule)]
Phone = Annotated[str, BeforeValidator(phone_rule)]


def _context_today(info: ValidationInfo) -> date:
    if info.context and info.context.get('today'):
        return info.context['today']
    return date.today()


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value)
        except ValueError:
            try:
                return datetime.fromisoformat(value).date()
            except ValueError:
                pass
    raise ValueError('Please select a valid date')


def _parse_party_size(value: Any) -> int:
    if isinstance(value, bool) or value is None or value == '':
        raise ValueError('Party size must be a number')
    if isinstance(value, int):
        return value
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError('Party size must be a number')
    if not number.is_finite():
        raise ValueError('Party size must be a number')
    if number != number.to_integral_value():
        raise ValueError('Party size must be a whole number')
    return int(number)


class BookingForm(BaseModel):
    name: Name = Field(None, validate_default=True)
    email: Email = Field(None, validate_default=True)
    phone: Phone = Field(None, validate_default=True)
    date: DateType = Field(None, validate_default=True)
    time: str = Field(None, validate_default=True)
    party_size: int = Field(
        None,
        validate_default=True,
        validation_alias=AliasChoices('party_size', 'partySize'),
    )
    special_requests: Optional[str] = Field(
        None,
        validation_alias=AliasChoices('special_requests', 'specialRequests'),
    )

    @field_validator('date', mode='before')
    @classmethod
    def check_date(cls, value: Any, info: ValidationInfo) -> DateType:
        booking_date = _parse_date(value)
        if booking_date < _context_today(info):
            raise ValueError('Please select a future date')
        return booking_date

    @field_validator('time', mode='before')
    @classmethod
    def check_time(cls, value: Any) -> str:
        time = _text(value, 'Time is required', 'Time')
        match = TIME_PATTERN.fullmatch(time)
        if not match:
            raise ValueError('Please enter a valid time (HH:MM)')
        return f'{int(match.group(1)):02d}:{match.group(2)}'

    @field_validator('party_size', mode='before')
    @classmethod
    def check_party_size(cls, value: Any) -> int:
        size = _parse_party_size(value)
        if size < 1:
            raise ValueError('Party size must be at least 1')
        if size > MAX_PARTY_SIZE:
            raise ValueError(f'Party size must be at most {MAX_PARTY_SIZE}')
        return size

    @field_validator('special_requests', mode='before')
    @classmethod
    def check_special_requests(cls, value: Any) -> Optional[str]:
        if value is None or value == '':
            return None
        if not isinstance(value, str):
            raise ValueError('Special requests must be text')
        if len(value) > 500:
            raise ValueError('Special requests must be less than 500 characters')
        return value


class ContactForm(BaseModel):
    name: Name = Field(None, validate_default=True)
    email: Email = Field(None, validate_default=True)
    phone: Phone = Field(None, validate_default=True)
    message: str = Field(None, validate_default=True)

    @field_validator('message', mode='before')
    @classmethod
    def check_message(cls, value: Any) -> str:
        message = _text(value, 'Message is required', 'Message')
        return _length(message, 10, 1000, 'Message')


class CustomerInfo(BaseModel):
    """Delivery details collected before a WhatsApp order"""
    name: Name = Field(None, validate_default=True)
    phone: Phone = Field(None, validate_default=True)
    address: str = Field(None, validate_default=True)

    @field_validator('address', mode='before')
    @classmethod
    def check_address(cls, value: Any) -> str:
        address = _text(value, 'Delivery address is required', 'Address')
        return _length(address, 10, 300, 'Address')


class AdminLoginForm(BaseModel):
    password: str = Field(None, validate_default=True)

    @field_validator('password', mode='before')
    @classmethod
    def check_password(cls, value: Any) -> str:
        password = _text(value, 'Password is required', 'Password')
        if len(password) < 8:
            raise ValueError('Password must be at least 8 characters')
        return password


class MenuItem(BaseModel):
    """A dish on the menu, stored with camelCase keys in menu.json"""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=100)
    name_hi: str = Field(alias='nameHi', min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    description_hi: str = Field(alias='descriptionHi', min_length=1, max_length=500)
    price: Decimal = Field(gt=0)
    category: Literal['thali', 'ghar-ka-khana', 'street-delights', 'mithai', 'sattu-specials']
    image: str = Field(pattern=r'(?i)^/images/dishes/.*\.(jpg|jpeg|png|webp)$')
    is_veg: bool = Field(alias='isVeg')
    spice_level: Optional[Literal['mild', 'medium', 'hot']] = Field(None, alias='spiceLevel')
    is_available: bool = Field(True, alias='isAvailable')
    featured: bool = False

    @field_serializer('price')
    def serialize_price(self, price: Decimal):
        if price == price.to_integral_value():
            return int(price)
        return float(price)

    def to_cart_item(self) -> Dict[str, Any]:
        return {
            'product_id': self.id,
            'name': self.name,
            'name_hi': self.name_hi,
            'price': self.price,
            'image': self.image,
        }


MENU_ITEMS_ADAPTER = TypeAdapter(List[MenuItem])


def first_error_message(exc: ValidationError) -> str:
    error = exc.errors()[0]
    cause = (error.get('ctx') or {}).get('error')
    if isinstance(cause, Exception):
        return str(cause)
    return error['msg']


def _validate(model, data: Any, context: Optional[Dict[str, Any]] = None) -> Result:
    if not isinstance(data, dict):
        return Result.fail('Invalid form data', ErrorKind.VALIDATION)
    try:
        return Result.ok(model.model_validate(data, context=context))
    except ValidationError as e:
        return Result.fail(first_error_message(e), ErrorKind.VALIDATION)


def validate_booking(data: Any, today: Optional[date] = None) -> Result:
    return _validate(BookingForm, data, {'today': today} if today else None)


def validate_contact(data: Any) -> Result:
    return _validate(ContactForm, data)


def validate_customer_info(data: Any) -> Result:
    return _validate(CustomerInfo, data)


def validate_admin_login(data: Any) -> Result:
    return _validate(AdminLoginForm, data)


def validate_menu_items(items: Any) -> Result:
    """Validate a full menu; errors name the offending item path"""
    if not isinstance(items, list) or not items:
        return Result.fail('At least one menu item is required', ErrorKind.VALIDATION)
    try:
        menu_items = MENU_ITEMS_ADAPTER.validate_python(items)
    except ValidationError as e:
        error = e.errors()[0]
        path = '.'.join(str(part) for part in error['loc'])
        return Result.fail(f"Validation error: {path} - {first_error_message(e)}", ErrorKind.VALIDATION)
    return Result.ok(menu_items)


def validate_phone(phone: Any) -> Result:
    try:
        return Result.ok(phone_rule(phone))
    except ValueError as e:
        return Result.fail(str(e), ErrorKind.VALIDATION)


def validate_quantity(value: Any) -> Result:
    """Cart quantity as a whole number; bools and fractions are rejected"""
    message = 'Quantity must be a whole number'
    if isinstance(value, bool) or value is None or value == '':
        return Result.fail(message, ErrorKind.VALIDATION)
    if isinstance(value, int):
        return Result.ok(value)
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return Result.fail(message, ErrorKind.VALIDATION)
    if not number.is_finite() or number != number.to_integral_value():
        return Result.fail(message, ErrorKind.VALIDATION)
    return Result.ok(int(number))


def validate_email(email: Any) -> bool:
    try:
        email_rule(email)
    except ValueError:
        return False
    return True


def validate_future_date(value: date, today: Optional[date] = None) -> bool:
    return value >= (today or date.today())


def is_valid_time(time: str) -> bool:
    return bool(TIME_PATTERN.fullmatch(time or ''))
