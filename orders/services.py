"""
Order Service Layer - Atomic order placement and status tracking.

Order placement runs as one unit of work:
1. Validate each line quantity and decrement stock
2. Price the order with the loyalty discount
3. Insert the order header and one link row per line
4. Any failure rolls back every write above
"""
import logging
from dataclasses import dataclass
from typing import Dict, List

from django.db import DEFAULT_DB_ALIAS, transaction
from django.db.models import F
from django.utils import timezone

from catalog.models import Product
from .exceptions import InsufficientStockError, OrderNotFoundError, OrderValidationError
from .identifiers import generate_order_id
from .models import Order, OrderProduct
from .pricing import MAX_ORDER_LINES, calculate_order_value, validate_line_quantity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderLineRequest:
    """One requested (product, quantity) line of an incoming order."""
    product_id: str
    quantity: int


def _decrement_stock(line: OrderLineRequest, using: str) -> Product:
    """
    Take the line quantity out of stock and return the stored product row.

    The returned row carries the stored primary key, which can differ from
    the requested id under a case-insensitive collation.
    """
    # Conditional update keeps stock from going negative
    updated = Product.objects.using(using).filter(
        id=line.product_id,
        quantity__gte=line.quantity
    ).update(quantity=F('quantity') - line.quantity)

    product = Product.objects.using(using).filter(id=line.product_id).first()
    if updated:
        return product

    if product is None:
        raise OrderValidationError(f"Product {line.product_id} not found")
    raise InsufficientStockError(line.product_id, line.quantity, product.quantity)


def create_order(lines: List[OrderLineRequest], using: str = DEFAULT_DB_ALIAS) -> Order:
    """
    Place an order with atomic transaction handling.

    Either every stock decrement, the order row and all link rows are
    committed, or none of them are.

    Args:
        lines: Requested lines, in request order
        using: Database alias to run against

    Returns:
        The persisted Order

    Raises:
        OrderValidationError: Empty or oversized order, bad quantity or unknown product
        InsufficientStockError: A line asks for more than is in stock
        DatabaseError: Any storage failure
    """
    if not lines:
        raise OrderValidationError("Order must contain at least one item")
    if len(lines) > MAX_ORDER_LINES:
        raise OrderValidationError(
            f"Order has {len(lines)} lines (at most {MAX_ORDER_LINES} allowed)"
        )

    with transaction.atomic(using=using):
        priced_lines = []
        for line in lines:
            validate_line_quantity(line.product_id, line.quantity)
            product = _decrement_stock(line, using)
            priced_lines.append((product, line.quantity))
            logger.debug(f"Decremented {line.quantity} of product {product.pk}")

        value = calculate_order_value(priced_lines)

        order = Order.objects.using(using).create(
            id=generate_order_id(),
            value=value,
            status=Order.Status.PLACED,
            prod_quantity=len(lines)
        )

        OrderProduct.objects.using(using).bulk_create([
            OrderProduct(order=order, product=product)
            for product, _ in priced_lines
        ])

    logger.info(f"Order {order.id} placed: {len(lines)} lines, total ${value}")
    return order


def update_order_status(order_id: str, new_status: str, using: str = DEFAULT_DB_ALIAS) -> None:
    """
    Move an order to a new status.

    Dispatching stamps today's date; any other status clears it.

    Raises:
        OrderNotFoundError: If no order has this identifier
    """
    dispatch_date = None
    if new_status == Order.Status.DISPATCHED:
        dispatch_date = timezone.localdate()

    updated = Order.objects.using(using).filter(id=order_id).update(
        status=new_status,
        dispatch_date=dispatch_date
    )
    if not updated:
        raise OrderNotFoundError(order_id)

    logger.info(f"Order {order_id} moved to {new_status}")


def get_order_summary(order_id: str, using: str = DEFAULT_DB_ALIAS) -> Dict:
    """
    Get an order with its product identifiers in line order.

    Raises:
        OrderNotFoundError: If no order has this identifier
    """
    try:
        order = Order.objects.using(using).prefetch_related('product_links').get(id=order_id)
    except Order.DoesNotExist:
        raise OrderNotFoundError(order_id)

    return {
        'id': order.id,
        'products': order.product_ids,
        'orderValue': order.value,
        'status': order.status,
        'dispatchDate': order.dispatch_date.isoformat() if order.dispatch_date else None,
        'prodQuantity': order.prod_quantity,
    }
