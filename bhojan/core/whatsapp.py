"""WhatsApp order message and deep link generation"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Any
from urllib.parse import quote
import logging

from bhojan.core.cart import CartItem
from bhojan.core.config import COUNTRY_CODE, PAYMENT_METHOD, RESTAURANT_NAME, WHATSAPP_BASE_URL
from bhojan.core.money import CartTotals, calculate_cart_total, format_amount, format_plain_amount
from bhojan.core.validation import CustomerInfo

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves alone, beyond letters and digits
URI_COMPONENT_SAFE = "-_.!~*'()"


def generate_order_message(items: List[CartItem], customer: CustomerInfo) -> str:
    """Render the cart and delivery details as a WhatsApp order.

    The customer info must already be validated. An empty cart still renders,
    with no item lines and zero totals. Item names are always the English ones.
    """
    totals = calculate_cart_total(items)

    lines = [f"🍽️ *{RESTAURANT_NAME} Order*", ""]
    lines.append(f"*Customer:* {customer.name}")
    lines.append(f"*Phone:* {customer.phone}")
    lines.append(f"*Address:* {customer.address}")
    lines.append("")

    lines.append("*Order Items:*")
    for index, item in enumerate(items, start=1):
        lines.append(f"{index}. {item.name} x{item.quantity} - ₹{format_plain_amount(item.get_total_price())}")

    lines.append("")
    lines.append(f"*Subtotal:* ₹{format_amount(totals.subtotal)}")
    lines.append(f"*Tax (5%):* ₹{format_amount(totals.tax)}")
    lines.append(f"*Total:* ₹{format_amount(totals.total)}")
    lines.append("")
    lines.append(f"Payment: {PAYMENT_METHOD}")

    return "\n".join(lines)


def normalize_whatsapp_number(phone_number: str) -> str:
    # A number already starting with 91 is taken as carrying the country code
    if phone_number.startswith(COUNTRY_CODE):
        return phone_number
    return f"{COUNTRY_CODE}{phone_number}"


def generate_whatsapp_url(phone_number: str, message: str) -> str:
    """Deep link that opens a chat with the message pre-filled"""
    encoded = quote(message, safe=URI_COMPONENT_SAFE)
    return f"{WHATSAPP_BASE_URL}/{normalize_whatsapp_number(phone_number)}?text={encoded}"


@dataclass
class WhatsAppOrder:
    customer: CustomerInfo
    items: List[CartItem]
    totals: CartTotals
    message: str
    url: str
    order_date: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'customer_name': self.customer.name,
            'customer_phone': self.customer.phone,
            'delivery_address': self.customer.address,
            'items': [
                {'name': item.name, 'quantity': item.quantity, 'price': format_amount(item.price)}
                for item in self.items
            ],
            **self.totals.to_dict(),
            'order_date': self.order_date.isoformat(),
            'message': self.message,
            'url': self.url,
        }


def build_whatsapp_order(items: List[CartItem], customer: CustomerInfo, restaurant_whatsapp: str) -> WhatsAppOrder:
    message = generate_order_message(items, customer)
    url = generate_whatsapp_url(restaurant_whatsapp, message)
    logger.info(f"Built WhatsApp order for {customer.name} with {len(items)} items")
    return WhatsAppOrder(
        customer=customer,
        items=list(items),
        totals=calculate_cart_total(items),
        message=message,
        url=url,
    )
