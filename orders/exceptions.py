"""
Order errors raised by the service layer and mapped to HTTP responses
in the views.
"""


class OrderValidationError(Exception):
    """Raised when order validation fails."""
    pass


class InsufficientStockError(OrderValidationError):
    """Raised when there's not enough stock for an order item."""
    def __init__(self, product_id: str, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {available}"
        )


class OrderNotFoundError(Exception):
    """Raised when no order matches the given identifier."""
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")
