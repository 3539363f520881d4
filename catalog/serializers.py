"""
Serializers for catalog models.
Provides data validation and JSON conversion for API endpoints.
"""
from decimal import Decimal

from rest_framework import serializers
from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Serializer for the full product record returned by GET /products."""

    class Meta:
        model = Product
        fields = ['id', 'name', 'price', 'category', 'quantity']


class ProductUpdateSerializer(serializers.Serializer):
    """
    Serializer for one entry of a PUT /products batch.

    Every field is replaced, so all of them are required.
    """
    id = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=200)
    price = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal('0.00')
    )
    category = serializers.ChoiceField(choices=Product.Category.choices)
    quantity = serializers.IntegerField(min_value=0)
