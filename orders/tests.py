"""
Tests for order placement, pricing and status tracking.

Test Cases:
1. Pricing with and without the loyalty discount
2. Order identifier format
3. Order placed with stock decremented and link rows written
4. Invalid quantities leave catalog and orders untouched
5. Atomic rollback on storage failure
6. Status transitions and dispatch date
7. HTTP surface, including rate limiting
"""
from decimal import Decimal
from unittest.mock import MagicMock, patch

import redis
from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError
from django.db.models import F
from django.db.models.query import QuerySet
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone

from catalog.models import Product
from core import rate_limiting
from orders.exceptions import InsufficientStockError, OrderNotFoundError, OrderValidationError
from orders.identifiers import generate_order_id
from orders.models import Order, OrderProduct
from orders.pricing import MAX_ORDER_LINES, calculate_order_value
from orders.services import (
    OrderLineRequest,
    create_order,
    get_order_summary,
    update_order_status,
)


def make_product(product_id, price, category, quantity=5):
    return Product(
        id=product_id,
        name=f'Product {product_id}',
        price=Decimal(price),
        category=category,
        quantity=quantity
    )


class OrderPricingTestCase(SimpleTestCase):
    """Test cases for order value calculation."""

    def setUp(self):
        self.regular = make_product('R1', '10.00', Product.Category.REGULAR)
        self.budget = make_product('B1', '2.50', Product.Category.BUDGET)
        self.premium1 = make_product('X1', '20.00', Product.Category.PREMIUM)
        self.premium2 = make_product('X2', '5.00', Product.Category.PREMIUM)
        self.premium3 = make_product('X3', '8.00', Product.Category.PREMIUM)

    def test_total_without_discount(self):
        lines = [(self.regular, 2), (self.budget, 4), (self.premium1, 1)]

        # (2 * 10) + (4 * 2.50) + (1 * 20) = 50
        self.assertEqual(calculate_order_value(lines), Decimal('50.00'))

    def test_discount_with_three_premium_lines(self):
        lines = [
            (self.regular, 2),
            (self.premium1, 1),
            (self.premium2, 1),
            (self.premium3, 1),
        ]

        # 53 * 0.9
        self.assertEqual(calculate_order_value(lines), Decimal('47.7'))

    def test_no_discount_with_two_premium_lines(self):
        lines = [(self.premium1, 3), (self.premium2, 3)]

        self.assertEqual(calculate_order_value(lines), Decimal('75.00'))

    def test_premium_lines_counted_not_units(self):
        """A single Premium line counts once, whatever its quantity."""
        lines = [(self.premium1, 10), (self.regular, 1)]

        self.assertEqual(calculate_order_value(lines), Decimal('210.00'))

    def test_same_premium_product_on_three_lines_qualifies(self):
        lines = [(self.premium2, 1), (self.premium2, 1), (self.premium2, 1)]

        self.assertEqual(calculate_order_value(lines), Decimal('13.5'))

    def test_only_premium_category_counts(self):
        self.assertTrue(self.premium1.is_premium)
        self.assertFalse(self.regular.is_premium)
        self.assertFalse(self.budget.is_premium)

    def test_invalid_quantity_names_product(self):
        for quantity in (0, 11, -3):
            with self.subTest(quantity=quantity):
                with self.assertRaises(OrderValidationError) as context:
                    calculate_order_value([(self.regular, 1), (self.premium1, quantity)])
                self.assertIn('X1', str(context.exception))

    def test_boundary_quantities_accepted(self):
        lines = [(self.regular, 1), (self.budget, 10)]

        self.assertEqual(calculate_order_value(lines), Decimal('35.00'))

    def test_pricing_is_idempotent(self):
        lines = [(self.premium1, 2), (self.premium2, 1), (self.premium3, 4)]

        first = calculate_order_value(lines)
        second = calculate_order_value(lines)

        self.assertEqual(first, second)
        self.assertEqual(self.premium1.quantity, 5)


class OrderIdentifierTestCase(SimpleTestCase):

    def test_identifier_has_prefix_and_timestamp(self):
        with patch('orders.identifiers.time.time', return_value=1760870400.75):
            order_id = generate_order_id()

        self.assertRegex(order_id, r'^ORD1760870400-[0-9a-f]{8}$')

    def test_identifiers_in_same_second_differ(self):
        with patch('orders.identifiers.time.time', return_value=1760870400.0):
            ids = {generate_order_id() for _ in range(50)}

        self.assertEqual(len(ids), 50)


class OrderTransactionTestCase(TestCase):
    """Test cases for order transaction logic."""

    def setUp(self):
        """Set up the catalog from the reference scenario."""
        self.p1 = Product.objects.create(
            id='P1', name='Notebook', price=Decimal('10.00'),
            category=Product.Category.REGULAR, quantity=5
        )
        self.p2 = Product.objects.create(
            id='P2', name='Headphones', price=Decimal('20.00'),
            category=Product.Category.PREMIUM, quantity=5
        )
        self.p3 = Product.objects.create(
            id='P3', name='Pen Set', price=Decimal('5.00'),
            category=Product.Category.PREMIUM, quantity=5
        )
        self.p4 = Product.objects.create(
            id='P4', name='Desk Mat', price=Decimal('8.00'),
            category=Product.Category.PREMIUM, quantity=5
        )

    def snapshot(self):
        return (
            list(Product.objects.order_by('id').values_list(
                'id', 'name', 'price', 'category', 'quantity'
            )),
            list(Order.objects.order_by('id').values_list(
                'id', 'value', 'status', 'dispatch_date', 'prod_quantity'
            )),
            OrderProduct.objects.count(),
        )

    def reference_lines(self):
        return [
            OrderLineRequest('P1', 2),
            OrderLineRequest('P2', 1),
            OrderLineRequest('P3', 1),
            OrderLineRequest('P4', 1),
        ]

    def test_order_placed_with_discount(self):
        """
        Test: Reference scenario is placed and discounted.

        Given: Three Premium lines out of four
        When: Placing the order
        Then: Value is 47.7, status Placed, four lines, stock decremented
        """
        order = create_order(self.reference_lines())

        order.refresh_from_db()
        self.assertEqual(order.value, Decimal('47.7'))
        self.assertEqual(order.status, Order.Status.PLACED)
        self.assertEqual(order.prod_quantity, 4)
        self.assertIsNone(order.dispatch_date)
        self.assertTrue(order.id.startswith('ORD'))

        quantities = dict(Product.objects.values_list('id', 'quantity'))
        self.assertEqual(quantities, {'P1': 3, 'P2': 4, 'P3': 4, 'P4': 4})

        self.assertEqual(order.product_ids, ['P1', 'P2', 'P3', 'P4'])
        self.assertEqual(order.product_links.count(), order.prod_quantity)

    def test_line_count_is_not_unit_count(self):
        order = create_order([OrderLineRequest('P1', 3), OrderLineRequest('P2', 2)])

        self.assertEqual(order.prod_quantity, 2)
        self.assertEqual(OrderProduct.objects.filter(order=order).count(), 2)

    def test_price_read_from_catalog(self):
        order = create_order([OrderLineRequest('P1', 1)])

        self.assertEqual(order.value, Decimal('10.00'))

    def test_duplicate_product_lines_each_decrement(self):
        order = create_order([OrderLineRequest('P1', 2), OrderLineRequest('P1', 2)])

        self.p1.refresh_from_db()
        self.assertEqual(self.p1.quantity, 1)
        self.assertEqual(order.prod_quantity, 2)
        self.assertEqual(order.product_ids, ['P1', 'P1'])

    def test_invalid_quantity_changes_nothing(self):
        for quantity in (0, 11, -1):
            with self.subTest(quantity=quantity):
                before = self.snapshot()
                lines = [OrderLineRequest('P1', 2), OrderLineRequest('P2', quantity)]

                with self.assertRaises(OrderValidationError) as context:
                    create_order(lines)

                self.assertIn('P2', str(context.exception))
                self.assertEqual(self.snapshot(), before)

    def test_validation_error_empty_items(self):
        with self.assertRaises(OrderValidationError) as context:
            create_order([])

        self.assertIn('at least one item', str(context.exception))

    def test_unknown_product_rolls_back(self):
        before = self.snapshot()

        with self.assertRaises(OrderValidationError) as context:
            create_order([OrderLineRequest('P1', 1), OrderLineRequest('NOPE', 1)])

        self.assertIn('not found', str(context.exception))
        self.assertEqual(self.snapshot(), before)

    def test_line_id_differing_in_case_is_not_found(self):
        before = self.snapshot()

        with self.assertRaises(OrderValidationError) as context:
            create_order([OrderLineRequest('p1', 1)])

        self.assertIn('not found', str(context.exception))
        self.assertEqual(self.snapshot(), before)

    def test_stored_product_id_used_for_pricing_and_links(self):
        """
        Test: Order uses the stored product row, not the requested id.

        Given: A store whose collation matches ids case-insensitively
        When: Lines reference 'p1' and 'p2'
        Then: The order is priced from P1/P2 and linked to P1/P2
        """
        def case_insensitive_decrement(line, using):
            stored_id = line.product_id.upper()
            Product.objects.filter(id=stored_id).update(quantity=F('quantity') - line.quantity)
            return Product.objects.get(id=stored_id)

        with patch('orders.services._decrement_stock', side_effect=case_insensitive_decrement):
            order = create_order([OrderLineRequest('p1', 2), OrderLineRequest('p2', 1)])

        self.assertEqual(order.value, Decimal('40.00'))
        self.assertEqual(order.product_ids, ['P1', 'P2'])
        self.p1.refresh_from_db()
        self.assertEqual(self.p1.quantity, 3)

    def test_too_many_lines_rejected(self):
        before = self.snapshot()
        lines = [OrderLineRequest('P1', 1)] * (MAX_ORDER_LINES + 1)

        with self.assertRaises(OrderValidationError) as context:
            create_order(lines)

        self.assertIn(f'at most {MAX_ORDER_LINES}', str(context.exception))
        self.assertEqual(self.snapshot(), before)

    def test_insufficient_stock_rolls_back(self):
        """
        Test: Inventory unchanged after a line exceeds stock.

        Given: P3 has only 5 units
        When: Requesting 6 units of P3 after a valid P1 line
        Then: Nothing is decremented and no order exists
        """
        before = self.snapshot()

        with self.assertRaises(InsufficientStockError) as context:
            create_order([OrderLineRequest('P1', 2), OrderLineRequest('P3', 6)])

        self.assertEqual(context.exception.available, 5)
        self.assertEqual(context.exception.requested, 6)
        self.assertEqual(self.snapshot(), before)

    def test_order_with_exact_stock(self):
        create_order([OrderLineRequest('P2', 5)])

        self.p2.refresh_from_db()
        self.assertEqual(self.p2.quantity, 0)

    def test_storage_failure_before_order_insert_rolls_back(self):
        before = self.snapshot()

        with patch('orders.services.generate_order_id', side_effect=DatabaseError('disk I/O error')):
            with self.assertRaises(DatabaseError):
                create_order(self.reference_lines())

        self.assertEqual(self.snapshot(), before)

    def test_storage_failure_on_link_insert_rolls_back(self):
        before = self.snapshot()

        with patch.object(
            QuerySet, 'bulk_create',
            side_effect=IntegrityError('constraint failed')
        ):
            with self.assertRaises(IntegrityError):
                create_order(self.reference_lines())

        self.assertEqual(self.snapshot(), before)


class OrderStatusTestCase(TestCase):
    """Test cases for status transitions."""

    def setUp(self):
        self.product = Product.objects.create(
            id='P1', name='Notebook', price=Decimal('10.00'),
            category=Product.Category.REGULAR, quantity=20
        )
        self.order = create_order([OrderLineRequest('P1', 1)])

    def test_dispatch_sets_today(self):
        update_order_status(self.order.id, Order.Status.DISPATCHED)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.DISPATCHED)
        self.assertEqual(self.order.dispatch_date, timezone.localdate())
        self.assertTrue(self.order.is_dispatched)

    def test_other_status_clears_dispatch_date(self):
        update_order_status(self.order.id, Order.Status.DISPATCHED)
        update_order_status(self.order.id, Order.Status.PLACED)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.PLACED)
        self.assertIsNone(self.order.dispatch_date)

    def test_unknown_order_raises(self):
        with self.assertRaises(OrderNotFoundError):
            update_order_status('ORD0-missing', Order.Status.COMPLETED)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.PLACED)

    def test_order_summary(self):
        summary = get_order_summary(self.order.id)

        self.assertEqual(summary['id'], self.order.id)
        self.assertEqual(summary['products'], ['P1'])
        self.assertEqual(summary['prodQuantity'], 1)
        self.assertIsNone(summary['dispatchDate'])


class OrderApiTestCase(TestCase):
    """Test cases for the order HTTP endpoints."""

    def setUp(self):
        Product.objects.create(
            id='P1', name='Notebook', price=Decimal('10.00'),
            category=Product.Category.REGULAR, quantity=5
        )
        Product.objects.create(
            id='P2', name='Headphones', price=Decimal('20.00'),
            category=Product.Category.PREMIUM, quantity=5
        )
        Product.objects.create(
            id='P3', name='Pen Set', price=Decimal('5.00'),
            category=Product.Category.PREMIUM, quantity=5
        )
        Product.objects.create(
            id='P4', name='Desk Mat', price=Decimal('8.00'),
            category=Product.Category.PREMIUM, quantity=5
        )
        # Clients send the catalog shape; price and category are ignored
        self.payload = {
            'orderProducts': [
                {'id': 'P1', 'name': 'Notebook', 'price': 1, 'category': 'Budget', 'quantity': 2},
                {'id': 'P2', 'quantity': 1},
                {'id': 'P3', 'quantity': 1},
                {'id': 'P4', 'quantity': 1},
            ]
        }

    def place(self, payload):
        return self.client.post('/orders', payload, content_type='application/json')

    def test_place_order(self):
        response = self.place(self.payload)

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['message'], 'Order placed successfully')

        order = Order.objects.get(id=body['orderID'])
        self.assertEqual(order.value, Decimal('47.7'))
        self.assertEqual(order.prod_quantity, 4)

    def test_malformed_body(self):
        response = self.client.post('/orders', '{"orderProducts": [', content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Malformed Input')
        self.assertIn('JSON parse error', response.json()['detail'])
        self.assertEqual(Order.objects.count(), 0)

    def test_missing_order_products(self):
        response = self.place({'items': []})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Validation Error')
        self.assertIn('orderProducts', response.json()['detail'])

    def test_line_id_case_mismatch_returns_bad_request(self):
        response = self.place({'orderProducts': [{'id': 'p1', 'quantity': 1}]})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Validation Error')
        self.assertEqual(Product.objects.get(id='P1').quantity, 5)

    def test_invalid_quantity_returns_bad_request(self):
        self.payload['orderProducts'][1]['quantity'] = 11

        response = self.place(self.payload)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Validation Error')
        self.assertIn('P2', response.json()['detail'])
        self.assertEqual(Product.objects.get(id='P1').quantity, 5)
        self.assertEqual(Order.objects.count(), 0)

    def test_storage_failure_returns_server_error(self):
        with patch('orders.services.generate_order_id', side_effect=DatabaseError('disk I/O error')):
            response = self.place(self.payload)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['detail'], 'Transaction aborted')
        quantities = dict(Product.objects.values_list('id', 'quantity'))
        self.assertEqual(quantities, {'P1': 5, 'P2': 5, 'P3': 5, 'P4': 5})

    def test_order_detail(self):
        order_id = self.place(self.payload).json()['orderID']

        response = self.client.get(f'/orders/{order_id}')

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['products'], ['P1', 'P2', 'P3', 'P4'])
        self.assertEqual(body['orderValue'], 47.7)
        self.assertEqual(body['status'], 'Placed')

    def test_order_detail_not_found(self):
        response = self.client.get('/orders/ORD0-missing')

        self.assertEqual(response.status_code, 404)

    def test_patch_dispatched(self):
        order_id = self.place(self.payload).json()['orderID']

        response = self.client.patch(
            f'/orders/{order_id}', {'status': 'Dispatched'}, content_type='application/json'
        )

        self.assertEqual(response.status_code, 200)
        order = Order.objects.get(id=order_id)
        self.assertEqual(order.dispatch_date, timezone.localdate())

    def test_patch_unknown_order(self):
        self.place(self.payload)
        before = list(Order.objects.values_list('id', 'status', 'dispatch_date'))

        response = self.client.patch(
            '/orders/ORD0-missing', {'status': 'Completed'}, content_type='application/json'
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(list(Order.objects.values_list('id', 'status', 'dispatch_date')), before)

    def test_patch_invalid_status(self):
        order_id = self.place(self.payload).json()['orderID']

        response = self.client.patch(
            f'/orders/{order_id}', {'status': 'Shipped'}, content_type='application/json'
        )

        self.assertEqual(response.status_code, 400)


class OrderRateLimitTestCase(TestCase):
    """Test rate limiting on order placement."""

    def setUp(self):
        Product.objects.create(
            id='P1', name='Notebook', price=Decimal('10.00'),
            category=Product.Category.REGULAR, quantity=50
        )
        self.payload = {'orderProducts': [{'id': 'P1', 'quantity': 1}]}

    def place(self):
        return self.client.post('/orders', self.payload, content_type='application/json')

    @override_settings(RATE_LIMIT_ENABLED=True)
    def test_limit_exceeded(self):
        client = MagicMock()
        client.incr.return_value = 21
        client.ttl.return_value = 42

        with patch('core.rate_limiting.get_redis_client', return_value=client):
            response = self.place()

        self.assertEqual(response.status_code, 429)
        self.assertEqual(response['Retry-After'], '42')
        self.assertEqual(Order.objects.count(), 0)

    @override_settings(RATE_LIMIT_ENABLED=True)
    def test_first_request_sets_window(self):
        client = MagicMock()
        client.incr.return_value = 1
        client.ttl.return_value = 60

        with patch('core.rate_limiting.get_redis_client', return_value=client):
            response = self.place()

        self.assertEqual(response.status_code, 200)
        client.expire.assert_called_once()
        self.assertEqual(response['X-RateLimit-Remaining'], '19')

    @override_settings(RATE_LIMIT_ENABLED=True)
    def test_redis_error_fails_open(self):
        client = MagicMock()
        client.incr.side_effect = redis.ConnectionError('connection reset')

        with patch('core.rate_limiting.get_redis_client', return_value=client):
            response = self.place()

        self.assertEqual(response.status_code, 200)

    def test_unreachable_redis_disables_limiting(self):
        fake = MagicMock()
        fake.ping.side_effect = redis.ConnectionError('refused')

        with patch.object(rate_limiting, '_redis_checked', False), \
                patch.object(rate_limiting, '_redis_client', None), \
                patch('core.rate_limiting.redis.Redis.from_url', return_value=fake):
            self.assertIsNone(rate_limiting.get_redis_client())

    def test_client_ip_prefers_forwarded_header(self):
        request = MagicMock()
        request.META = {'HTTP_X_FORWARDED_FOR': '10.0.0.1, 10.0.0.2', 'REMOTE_ADDR': '127.0.0.1'}

        self.assertEqual(rate_limiting.get_client_ip(request), '10.0.0.1')


class OrderAdminTestCase(TestCase):

    def setUp(self):
        Product.objects.create(
            id='P1', name='Notebook', price=Decimal('10.00'),
            category=Product.Category.REGULAR, quantity=5
        )
        self.order = create_order([OrderLineRequest('P1', 1)])
        user = get_user_model().objects.create_superuser('admin', 'admin@example.com', 'secret')
        self.client.force_login(user)

    def test_order_changelist(self):
        response = self.client.get('/admin/orders/order/')

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, self.order.id)

    def test_order_change_page_shows_links(self):
        response = self.client.get(f'/admin/orders/order/{self.order.id}/change/')

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'Order Products')
