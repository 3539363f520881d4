"""
Catalog API Views.

Implements:
- GET /products - List the whole catalog
- PUT /products - Replace fields for a batch of products atomically
"""
import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import ProductSerializer, ProductUpdateSerializer
from .services import list_products, update_products

logger = logging.getLogger(__name__)


class ProductCatalogView(APIView):
    """
    GET: List all products
    PUT: Update name, price, category and quantity for many products

    Request Body (PUT):
    [
        {"id": "P1", "name": "Desk Lamp", "price": 10.0, "category": "Regular", "quantity": 5}
    ]
    """

    def get(self, request):
        try:
            products = list_products()
        except DatabaseError as e:
            logger.exception(f"Failed to load product catalog: {e}")
            return Response(
                {'error': 'Server Error', 'detail': 'Could not load product catalog'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(ProductSerializer(products, many=True).data)

    def put(self, request):
        serializer = ProductUpdateSerializer(data=request.data, many=True)
        serializer.is_valid(raise_exception=True)

        try:
            update_products(serializer.validated_data)
        except DatabaseError as e:
            logger.exception(f"Catalog update rolled back: {e}")
            return Response(
                {'error': 'Server Error', 'detail': 'Transaction aborted'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(status=status.HTTP_200_OK)
