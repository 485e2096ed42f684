"""Currency rounding and cart total calculation"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

from bhojan.core.config import TAX_RATE

CENT = Decimal('0.01')

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert a price to Decimal without picking up float noise"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_currency(amount: Number) -> Decimal:
    """Round to 2 decimal places, half-up on the cent boundary"""
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_tax(subtotal: Number, rate: Decimal = TAX_RATE) -> Decimal:
    return round_currency(to_decimal(subtotal) * rate)


def format_amount(amount: Number) -> str:
    """Always two decimals, e.g. 399.00"""
    return f"{round_currency(amount):.2f}"


def format_plain_amount(amount: Number) -> str:
    """Shortest form of an amount: 300 rather than 300.00, 12.5 rather than 12.50"""
    value = round_currency(amount)
    if value == value.to_integral_value():
        return str(int(value))
    return format(value.normalize(), 'f')


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    tax: Decimal
    total: Decimal

    def to_dict(self):
        return {
            'subtotal': format_amount(self.subtotal),
            'tax': format_amount(self.tax),
            'total': format_amount(self.total),
        }


def calculate_cart_total(items: Iterable) -> CartTotals:
    """Subtotal, 5% tax and total for anything with price and quantity"""
    subtotal = sum(
        (to_decimal(item.price) * item.quantity for item in items),
        Decimal('0'),
    )
    subtotal = round_currency(subtotal)
    tax = calculate_tax(subtotal)
    return CartTotals(subtotal=subtotal, tax=tax, total=subtotal + tax)
