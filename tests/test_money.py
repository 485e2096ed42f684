from decimal import Decimal

from bhojan.core.cart import CartItem
from bhojan.core.money import calculate_cart_total, calculate_tax, format_amount, format_plain_amount, round_currency


def make_item(product_id, price, quantity):
    return CartItem(product_id=product_id, name=product_id, name_hi='', price=Decimal(price), quantity=quantity)


def test_cart_total_scenario():
    items = [make_item('litti', '150', 2), make_item('paratha', '80', 1)]

    totals = calculate_cart_total(items)

    assert totals.subtotal == Decimal('380.00')
    assert totals.tax == Decimal('19.00')
    assert totals.total == Decimal('399.00')


def test_empty_cart_totals_are_zero():
    totals = calculate_cart_total([])

    assert totals.subtotal == Decimal('0.00')
    assert totals.tax == Decimal('0.00')
    assert totals.total == Decimal('0.00')
    assert totals.to_dict() == {'subtotal': '0.00', 'tax': '0.00', 'total': '0.00'}


def test_rounding_is_half_up_on_the_cent():
    # 0.10 * 5% = 0.005, which banker's rounding would send to 0.00
    totals = calculate_cart_total([make_item('chai', '0.10', 1)])

    assert totals.tax == Decimal('0.01')
    assert totals.total == Decimal('0.11')
    assert round_currency('2.345') == Decimal('2.35')


def test_tax_matches_rounded_five_percent_of_subtotal():
    for price, quantity in [('99.99', 3), ('12.50', 7), ('1', 1), ('333.33', 2)]:
        totals = calculate_cart_total([make_item('x', price, quantity)])
        assert totals.tax == calculate_tax(totals.subtotal)


def test_amount_formatting():
    assert format_amount(Decimal('399')) == '399.00'
    assert format_amount(12.5) == '12.50'
    assert format_plain_amount(Decimal('300.00')) == '300'
    assert format_plain_amount(Decimal('12.50')) == '12.5'
    assert format_plain_amount(Decimal('0')) == '0'
