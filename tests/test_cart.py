import json
from decimal import Decimal

import pytest

from bhojan.core.cart import ShoppingCart, CartItem
from bhojan.core.config import CART_SESSION_KEY

LITTI = {'product_id': 'litti-chokha', 'name': 'Litti Chokha', 'name_hi': 'लिट्टी चोखा',
         'price': Decimal('150'), 'image': '/images/dishes/litti-chokha.jpg'}
PARATHA = {'product_id': 'sattu-paratha', 'name': 'Sattu Paratha', 'name_hi': 'सत्तू पराठा',
           'price': Decimal('80'), 'image': '/images/dishes/sattu-paratha.jpg'}


@pytest.fixture
def storage():
    return {}


@pytest.fixture
def cart(storage):
    return ShoppingCart(storage)


def test_add_item_inserts_with_quantity_one(cart):
    cart.add_item(LITTI)

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 1
    assert cart.items[0].name_hi == 'लिट्टी चोखा'


def test_adding_same_product_increments_quantity(cart):
    for _ in range(3):
        cart.add_item(LITTI)
    for _ in range(4):
        cart.add_item(LITTI)

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 7
    assert cart.item_count == 7


def test_items_keep_insertion_order(cart):
    cart.add_item(PARATHA)
    cart.add_item(LITTI)
    cart.add_item(PARATHA)

    assert [item.product_id for item in cart.items] == ['sattu-paratha', 'litti-chokha']


def test_remove_item(cart):
    cart.add_item(LITTI)
    cart.add_item(PARATHA)

    cart.remove_item('litti-chokha')

    assert [item.product_id for item in cart.items] == ['sattu-paratha']


def test_remove_unknown_item_is_a_noop(cart):
    cart.add_item(LITTI)

    cart.remove_item('does-not-exist')

    assert len(cart.items) == 1


def test_update_quantity_overwrites(cart):
    cart.add_item(LITTI)

    cart.update_quantity('litti-chokha', 5)

    assert cart.items[0].quantity == 5


@pytest.mark.parametrize('quantity', [0, -3])
def test_update_quantity_to_zero_or_less_matches_remove(quantity):
    removed_storage, updated_storage = {}, {}
    removed, updated = ShoppingCart(removed_storage), ShoppingCart(updated_storage)
    for cart in (removed, updated):
        cart.add_item(LITTI)
        cart.add_item(PARATHA)

    removed.remove_item('litti-chokha')
    updated.update_quantity('litti-chokha', quantity)

    assert updated.items == removed.items
    assert updated_storage == removed_storage


def test_clear(cart, storage):
    cart.add_item(LITTI)
    cart.add_item(PARATHA)

    cart.clear()

    assert cart.is_empty()
    assert json.loads(storage[CART_SESSION_KEY]) == []


def test_totals_recomputed_after_mutation(cart):
    cart.add_item(LITTI)
    cart.add_item(LITTI)
    cart.add_item(PARATHA)

    first = cart.get_totals()
    second = cart.get_totals()
    assert first == second
    assert first.total == Decimal('399.00')

    cart.update_quantity('sattu-paratha', 2)
    assert cart.get_totals().subtotal == Decimal('460.00')


def test_every_mutation_is_persisted(cart, storage):
    cart.add_item(LITTI)
    assert json.loads(storage[CART_SESSION_KEY])[0]['quantity'] == 1

    cart.add_item(LITTI)
    assert json.loads(storage[CART_SESSION_KEY])[0]['quantity'] == 2

    cart.update_quantity('litti-chokha', 4)
    assert json.loads(storage[CART_SESSION_KEY])[0]['quantity'] == 4

    cart.remove_item('litti-chokha')
    assert json.loads(storage[CART_SESSION_KEY]) == []


def test_cart_reloads_from_session_storage(cart, storage):
    cart.add_item(PARATHA)
    cart.add_item(LITTI)
    cart.update_quantity('litti-chokha', 3)

    restored = ShoppingCart(storage)

    assert restored.items == cart.items
    assert restored.items[1] == CartItem(
        product_id='litti-chokha', name='Litti Chokha', name_hi='लिट्टी चोखा',
        price=Decimal('150'), quantity=3, image='/images/dishes/litti-chokha.jpg',
    )


@pytest.mark.parametrize('stored', [
    'not json',
    '{"product_id": "x"}',
    '[{"product_id": "x"}]',
    '[{"product_id": "x", "name": "X", "price": "10", "quantity": 0}]',
    '[{"product_id": "x", "name": "X", "price": "abc", "quantity": 1}]',
    '["just a string"]',
])
def test_unreadable_stored_cart_falls_back_to_empty(stored):
    cart = ShoppingCart({CART_SESSION_KEY: stored})

    assert cart.is_empty()


def test_to_dict_includes_line_totals_and_totals(cart):
    cart.add_item(LITTI)
    cart.add_item(LITTI)

    data = cart.to_dict()

    assert data['items'][0]['line_total'] == '300.00'
    assert data['items'][0]['price'] == '150'
    assert data['item_count'] == 2
    assert data['subtotal'] == '300.00'
    assert data['tax'] == '15.00'
    assert data['total'] == '315.00'
