"""
Order Models - Order and OrderProduct entities with status tracking.

Order Status Flow:
    PLACED -> DISPATCHED (dispatch date stamped)
    any -> COMPLETED / CANCELED (dispatch date cleared)
"""
from decimal import Decimal
from django.db import models

from catalog.models import Product


class Order(models.Model):
    """
    Order entity created once by placement.

    Status:
        - PLACED: Stock decremented, order persisted
        - DISPATCHED: Handed to shipping, dispatch date set
        - COMPLETED: Delivered
        - CANCELED: Abandoned after placement
    """

    class Status(models.TextChoices):
        PLACED = 'Placed', 'Placed'
        DISPATCHED = 'Dispatched', 'Dispatched'
        COMPLETED = 'Completed', 'Completed'
        CANCELED = 'Canceled', 'Canceled'

    id = models.CharField(
        primary_key=True,
        max_length=64,
        help_text="Generated order identifier"
    )
    # Prices carry two places; the loyalty discount adds a third
    value = models.DecimalField(
        max_digits=14,
        decimal_places=3,
        default=Decimal('0.000'),
        help_text="Total order value after discounts"
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PLACED,
        db_index=True,
        help_text="Current order status"
    )
    dispatch_date = models.DateField(
        null=True,
        blank=True,
        db_column='dispatchDate',
        help_text="Set only while the order is dispatched"
    )
    prod_quantity = models.PositiveIntegerField(
        default=0,
        db_column='prodQuantity',
        help_text="Number of order lines (not units)"
    )

    class Meta:
        db_table = 'orders'
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'
        ordering = ['id']

    def __str__(self):
        return f"Order {self.id} ({self.status})"

    @property
    def is_dispatched(self) -> bool:
        return self.status == self.Status.DISPATCHED

    @property
    def product_ids(self):
        return [link.product_id for link in self.product_links.all()]


class OrderProduct(models.Model):
    """
    Association row linking an order to one of its products.

    One row per order line, written in the same transaction as the
    order header and never modified afterwards.
    """
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='product_links',
        help_text="Parent order"
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,  # Prevent deletion of products with orders
        related_name='order_links',
        help_text="Ordered product"
    )

    class Meta:
        db_table = 'order_products'
        verbose_name = 'Order Product'
        verbose_name_plural = 'Order Products'
        ordering = ['id']

    def __str__(self):
        return f"{self.order_id} -> {self.product_id}"
