"""
Order API Views.

Implements:
- POST /orders - Place an order with atomic transaction
- GET /orders/{id} - Order detail with product ids
- PATCH /orders/{id} - Update order status
"""
import logging
from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.rate_limiting import RateLimitMixin
from .exceptions import OrderNotFoundError, OrderValidationError
from .serializers import OrderCreateSerializer, OrderStatusSerializer
from .services import (
    OrderLineRequest,
    create_order,
    get_order_summary,
    update_order_status,
)

logger = logging.getLogger(__name__)


class OrderCreateView(RateLimitMixin, APIView):
    """
    POST: Place a new order with atomic transaction handling

    Request Body:
    {
        "orderProducts": [
            {"id": "P1", "quantity": 2},
            {"id": "P3", "quantity": 1}
        ]
    }

    Rate limited per client IP.
    """
    rate_limit_max_requests = settings.ORDER_RATE_LIMIT
    rate_limit_window_seconds = settings.ORDER_RATE_WINDOW

    def post(self, request):
        """
        Returns:
            - 200: Order placed
            - 400: Malformed body, invalid quantity, unknown product or short stock
            - 500: Storage failure, transaction rolled back
        """
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        lines = [
            OrderLineRequest(product_id=item['id'], quantity=item['quantity'])
            for item in serializer.validated_data['orderProducts']
        ]

        try:
            order = create_order(lines)
        except OrderValidationError as e:
            logger.warning(f"Order validation failed: {e}")
            return Response(
                {'error': 'Validation Error', 'detail': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )
        except DatabaseError as e:
            logger.exception(f"Order transaction aborted: {e}")
            return Response(
                {'error': 'Server Error', 'detail': 'Transaction aborted'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(
            {'message': 'Order placed successfully', 'orderID': order.id},
            status=status.HTTP_200_OK
        )


class OrderDetailView(APIView):
    """
    GET: Retrieve an order with its product ids
    PATCH: Set the order status; Dispatched stamps today's date
    """

    def get(self, request, order_id):
        try:
            summary = get_order_summary(order_id)
        except OrderNotFoundError as e:
            return Response(
                {'error': 'Not Found', 'detail': str(e)},
                status=status.HTTP_404_NOT_FOUND
            )

        return Response(summary)

    def patch(self, request, order_id):
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            update_order_status(order_id, serializer.validated_data['status'])
        except OrderNotFoundError as e:
            logger.warning(f"Status update failed: {e}")
            return Response(
                {'error': 'Not Found', 'detail': str(e)},
                status=status.HTTP_404_NOT_FOUND
            )
        except DatabaseError as e:
            logger.exception(f"Status update for order {order_id} failed: {e}")
            return Response(
                {'error': 'Server Error', 'detail': 'Could not update order status'},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        return Response(status=status.HTTP_200_OK)
