from dataclasses import dataclass, asdict
from typing import List, Dict, Optional, MutableMapping, Any
from decimal import Decimal, InvalidOperation
import json
import logging

from bhojan.core.config import CART_SESSION_KEY
from bhojan.core.money import CartTotals, calculate_cart_total, format_amount, to_decimal

logger = logging.getLogger(__name__)

@dataclass
class CartItem:
    product_id: str
    name: str
    name_hi: str
    price: Decimal
    quantity: int = 1
    image: str = ''

    def get_total_price(self) -> Decimal:
        """Line total: unit price times quantity"""
        return self.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['price'] = str(self.price)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CartItem':
        quantity = data['quantity']
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValueError(f"Invalid quantity for {data.get('product_id')}: {quantity!r}")
        return cls(
            product_id=str(data['product_id']),
            name=data['name'],
            name_hi=data.get('name_hi', ''),
            price=to_decimal(data['price']),
            quantity=quantity,
            image=data.get('image', ''),
        )

class ShoppingCart:
    """Line items for one browsing session.

    The session mapping is injected (the Flask session in the app, a dict in
    tests). The full item list is written back to it after every mutation.
    Concurrent tabs on the same session are last-write-wins.
    """

    def __init__(self, storage: MutableMapping, key: str = CART_SESSION_KEY):
        self.storage = storage
        self.key = key
        self.items: List[CartItem] = self._load()

    def _load(self) -> List[CartItem]:
        raw = self.storage.get(self.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("Stored cart is not a list")
            items = [CartItem.from_dict(entry) for entry in data]
        except (ValueError, KeyError, TypeError, InvalidOperation) as e:
            logger.warning(f"Failed to parse cart from session storage: {e}")
            return []
        logger.info(f"Restored cart with {len(items)} items")
        return items

    def _persist(self):
        """Serialize the full item list to the session store"""
        self.storage[self.key] = json.dumps([item.to_dict() for item in self.items])

    def _find(self, product_id: str) -> Optional[CartItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def add_item(self, menu_item: Dict):
        """Add one of an item, or bump its quantity if already in the cart"""
        product_id = str(menu_item['product_id'])
        existing = self._find(product_id)
        if existing:
            existing.quantity += 1
            logger.info(f"Updated existing item quantity. {existing.name} now has quantity {existing.quantity}")
        else:
            self.items.append(CartItem(
                product_id=product_id,
                name=menu_item['name'],
                name_hi=menu_item.get('name_hi', ''),
                price=to_decimal(menu_item['price']),
                quantity=1,
                image=menu_item.get('image', ''),
            ))
            logger.info(f"Added new item to cart: {menu_item['name']}")
        self._persist()

    def remove_item(self, product_id: str):
        """Remove an item; unknown ids are ignored"""
        before = len(self.items)
        self.items = [item for item in self.items if item.product_id != product_id]
        if len(self.items) < before:
            logger.info(f"Removed {product_id} from cart")
        self._persist()

    def update_quantity(self, product_id: str, quantity: int):
        if quantity <= 0:
            self.remove_item(product_id)
            return
        item = self._find(product_id)
        if item:
            item.quantity = quantity
            logger.info(f"Set {item.name} quantity to {quantity}")
        self._persist()

    def clear(self):
        """Clear all items from cart"""
        logger.info("Clearing cart")
        self.items = []
        self._persist()

    def get_totals(self) -> CartTotals:
        return calculate_cart_total(self.items)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def is_empty(self) -> bool:
        """Check if cart is empty"""
        return len(self.items) == 0

    def to_dict(self) -> Dict[str, Any]:
        totals = self.get_totals()
        return {
            'items': [
                dict(item.to_dict(), line_total=format_amount(item.get_total_price()))
                for item in self.items
            ],
            'item_count': self.item_count,
            **totals.to_dict(),
        }
