"""
Serializers for order requests.
"""
from rest_framework import serializers
from .models import Order


class OrderLineSerializer(serializers.Serializer):
    """
    Serializer for one line of an order placement request.

    Clients may send the full product shape; only id and quantity are
    read. Price and category always come from the catalog. The 1-10
    quantity range is checked inside the order transaction.
    """
    id = serializers.CharField(max_length=64)
    quantity = serializers.IntegerField()


class OrderCreateSerializer(serializers.Serializer):
    """
    Serializer for creating orders via POST /orders

    Request format:
    {
        "orderProducts": [
            {"id": "P1", "quantity": 2},
            {"id": "P3", "quantity": 1}
        ]
    }
    """
    orderProducts = OrderLineSerializer(many=True)


class OrderStatusSerializer(serializers.Serializer):
    """Serializer for PATCH /orders/{orderID}."""
    status = serializers.ChoiceField(choices=Order.Status.choices)
