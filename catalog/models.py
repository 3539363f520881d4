"""
Catalog Models - Product rows shared by catalog maintenance and order placement.

Models:
    - Product: Items available for sale, with stock on hand
"""
from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal


class Product(models.Model):
    """
    Product entity representing items available for sale.

    Stock on hand lives on the product row itself; order placement
    decrements it inside the order transaction.
    """

    class Category(models.TextChoices):
        PREMIUM = 'Premium', 'Premium'
        REGULAR = 'Regular', 'Regular'
        BUDGET = 'Budget', 'Budget'

    id = models.CharField(
        primary_key=True,
        max_length=64,
        help_text="Unique product identifier"
    )
    name = models.CharField(
        max_length=200,
        db_index=True,
        help_text="Product name for display"
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Unit price (non-negative)"
    )
    category = models.CharField(
        max_length=20,
        choices=Category.choices,
        default=Category.REGULAR,
        db_index=True,
        help_text="Pricing category"
    )
    quantity = models.PositiveIntegerField(
        default=0,
        help_text="Current stock quantity"
    )

    class Meta:
        db_table = 'products'
        verbose_name = 'Product'
        verbose_name_plural = 'Products'
        ordering = ['id']

    def __str__(self):
        return f"{self.name} (${self.price})"

    @property
    def is_premium(self) -> bool:
        return self.category == self.Category.PREMIUM

    @property
    def is_out_of_stock(self) -> bool:
        """Check if product is out of stock."""
        return self.quantity == 0
