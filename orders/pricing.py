"""
Order pricing and line validation.

Pricing only reads product price and category; it never touches stock.
"""
from decimal import Decimal
from typing import Iterable, Tuple

from catalog.models import Product
from .exceptions import OrderValidationError

MIN_LINE_QUANTITY = 1
MAX_LINE_QUANTITY = 10

LOYALTY_PREMIUM_LINES = 3
LOYALTY_DISCOUNT_FACTOR = Decimal('0.9')

# Keeps the largest possible total inside the orders.value column
MAX_ORDER_LINES = 50


def validate_line_quantity(product_id: str, quantity: int) -> None:
    """
    Check a requested quantity against the per-line limits.

    Raises:
        OrderValidationError: If quantity is outside [1, 10]
    """
    if not MIN_LINE_QUANTITY <= quantity <= MAX_LINE_QUANTITY:
        raise OrderValidationError(
            f"Invalid quantity for product {product_id}: {quantity} "
            f"(must be between {MIN_LINE_QUANTITY} and {MAX_LINE_QUANTITY})"
        )


def calculate_order_value(lines: Iterable[Tuple[Product, int]]) -> Decimal:
    """
    Compute the order total with the loyalty discount applied.

    The discount (10% off) applies when at least three lines reference a
    Premium product. Lines are counted, not units, so one Premium line
    with quantity 5 counts once.

    Args:
        lines: Sequence of (product, requested quantity) pairs

    Returns:
        Total order value

    Raises:
        OrderValidationError: On the first line with an invalid quantity
    """
    lines = list(lines)
    for product, quantity in lines:
        validate_line_quantity(product.pk, quantity)

    total = Decimal('0')
    premium_lines = 0
    for product, quantity in lines:
        total += product.price * quantity
        if product.is_premium:
            premium_lines += 1

    if premium_lines >= LOYALTY_PREMIUM_LINES:
        total *= LOYALTY_DISCOUNT_FACTOR

    return total
