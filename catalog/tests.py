"""
Tests for catalog listing, batch updates and seeding.
"""
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.db import DatabaseError
from django.test import TestCase

from catalog import services
from catalog.models import Product
from orders.services import OrderLineRequest, create_order
from orders.models import Order


class CatalogServiceTestCase(TestCase):
    """Test cases for catalog service functions."""

    def setUp(self):
        self.lamp = Product.objects.create(
            id='P1', name='Desk Lamp', price=Decimal('10.00'),
            category=Product.Category.REGULAR, quantity=5
        )
        self.chair = Product.objects.create(
            id='P2', name='Office Chair', price=Decimal('120.00'),
            category=Product.Category.PREMIUM, quantity=2
        )

    def test_list_products_returns_all(self):
        products = services.list_products()

        self.assertEqual([p.id for p in products], ['P1', 'P2'])

    def test_list_includes_out_of_stock(self):
        Product.objects.filter(id='P2').update(quantity=0)

        products = services.list_products()

        self.assertEqual(len(products), 2)
        self.assertTrue(products[1].is_out_of_stock)

    def test_update_products(self):
        updated = services.update_products([
            {'id': 'P1', 'name': 'LED Desk Lamp', 'price': Decimal('12.50'),
             'category': Product.Category.BUDGET, 'quantity': 9},
        ])

        self.assertEqual(updated, 1)
        self.lamp.refresh_from_db()
        self.assertEqual(self.lamp.name, 'LED Desk Lamp')
        self.assertEqual(self.lamp.price, Decimal('12.50'))
        self.assertEqual(self.lamp.category, Product.Category.BUDGET)
        self.assertEqual(self.lamp.quantity, 9)

    def test_unknown_product_is_skipped(self):
        updated = services.update_products([
            {'id': 'MISSING', 'name': 'Ghost', 'price': Decimal('1.00'),
             'category': Product.Category.BUDGET, 'quantity': 1},
        ])

        self.assertEqual(updated, 0)
        self.assertFalse(Product.objects.filter(id='MISSING').exists())

    def test_failure_rolls_back_whole_batch(self):
        """
        Test: A failing second row undoes the first.

        Given: Two updates in one batch
        When: The second row hits a storage error
        Then: The first row is unchanged too
        """
        original = services._update_product
        applied = []

        def flaky_update(update, using):
            if applied:
                raise DatabaseError('disk I/O error')
            applied.append(update['id'])
            return original(update, using)

        batch = [
            {'id': 'P1', 'name': 'Renamed', 'price': Decimal('1.00'),
             'category': Product.Category.BUDGET, 'quantity': 1},
            {'id': 'P2', 'name': 'Renamed Too', 'price': Decimal('2.00'),
             'category': Product.Category.BUDGET, 'quantity': 1},
        ]

        with patch('catalog.services._update_product', side_effect=flaky_update):
            with self.assertRaises(DatabaseError):
                services.update_products(batch)

        self.assertEqual(applied, ['P1'])
        self.lamp.refresh_from_db()
        self.assertEqual(self.lamp.name, 'Desk Lamp')
        self.assertEqual(self.lamp.quantity, 5)


class CatalogApiTestCase(TestCase):
    """Test cases for GET and PUT /products."""

    def setUp(self):
        Product.objects.create(
            id='P1', name='Desk Lamp', price=Decimal('10.00'),
            category=Product.Category.REGULAR, quantity=5
        )
        Product.objects.create(
            id='P2', name='Office Chair', price=Decimal('120.00'),
            category=Product.Category.PREMIUM, quantity=2
        )

    def test_get_products(self):
        response = self.client.get('/products')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), [
            {'id': 'P1', 'name': 'Desk Lamp', 'price': 10.0, 'category': 'Regular', 'quantity': 5},
            {'id': 'P2', 'name': 'Office Chair', 'price': 120.0, 'category': 'Premium', 'quantity': 2},
        ])

    def test_get_products_store_error(self):
        with patch('catalog.views.list_products', side_effect=DatabaseError('connection lost')):
            response = self.client.get('/products')

        self.assertEqual(response.status_code, 500)

    def test_put_products(self):
        payload = [
            {'id': 'P1', 'name': 'Desk Lamp', 'price': 11.5, 'category': 'Regular', 'quantity': 7},
            {'id': 'P2', 'name': 'Office Chair', 'price': 99.99, 'category': 'Regular', 'quantity': 3},
        ]

        response = self.client.put('/products', payload, content_type='application/json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b'')
        chair = Product.objects.get(id='P2')
        self.assertEqual(chair.price, Decimal('99.99'))
        self.assertEqual(chair.category, Product.Category.REGULAR)
        self.assertEqual(chair.quantity, 3)

    def test_put_malformed_body(self):
        response = self.client.put('/products', '[{"id": "P1"', content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Malformed Input')

    def test_put_invalid_entry_changes_nothing(self):
        payload = [
            {'id': 'P1', 'name': 'Desk Lamp', 'price': 11.5, 'category': 'Regular', 'quantity': 7},
            {'id': 'P2', 'name': 'Office Chair', 'price': 99.99, 'category': 'Luxury', 'quantity': 3},
        ]

        response = self.client.put('/products', payload, content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(Product.objects.get(id='P1').quantity, 5)

    def test_put_negative_quantity_rejected(self):
        payload = [
            {'id': 'P1', 'name': 'Desk Lamp', 'price': 10, 'category': 'Regular', 'quantity': -1},
        ]

        response = self.client.put('/products', payload, content_type='application/json')

        self.assertEqual(response.status_code, 400)

    def test_put_storage_failure(self):
        payload = [
            {'id': 'P1', 'name': 'Desk Lamp', 'price': 10, 'category': 'Regular', 'quantity': 1},
        ]

        with patch('catalog.views.update_products', side_effect=DatabaseError('deadlock')):
            response = self.client.put('/products', payload, content_type='application/json')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['detail'], 'Transaction aborted')

    def test_health_check(self):
        response = self.client.get('/health/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'healthy')


class SeedProductsCommandTestCase(TestCase):

    def test_seed_creates_products(self):
        out = StringIO()

        call_command('seed_products', '--count', '12', stdout=out)

        self.assertEqual(Product.objects.count(), 12)
        self.assertIn('Created 12 products', out.getvalue())
        categories = set(Product.objects.values_list('category', flat=True))
        self.assertTrue(categories <= set(Product.Category.values))

    def test_seed_appends_after_existing(self):
        call_command('seed_products', '--count', '3', stdout=StringIO())
        call_command('seed_products', '--count', '2', stdout=StringIO())

        self.assertEqual(Product.objects.count(), 5)

    def test_reseed_after_delete_creates_every_row(self):
        """
        Test: Re-seeding after a deletion does not reuse existing ids.

        Given: Three seeded products with the first one deleted
        When: Seeding two more
        Then: Both new rows exist and follow the highest seeded id
        """
        call_command('seed_products', '--count', '3', stdout=StringIO())
        Product.objects.filter(id='P00001').delete()
        out = StringIO()

        call_command('seed_products', '--count', '2', stdout=out)

        self.assertEqual(Product.objects.count(), 4)
        self.assertEqual(
            sorted(Product.objects.values_list('id', flat=True)),
            ['P00002', 'P00003', 'P00004', 'P00005']
        )
        self.assertIn('Created 2 products', out.getvalue())

    def test_clear_removes_orders_and_products(self):
        Product.objects.create(
            id='OLD', name='Old Stock', price=Decimal('3.00'),
            category=Product.Category.BUDGET, quantity=4
        )
        create_order([OrderLineRequest('OLD', 1)])

        call_command('seed_products', '--clear', '--count', '4', stdout=StringIO())

        self.assertEqual(Order.objects.count(), 0)
        self.assertFalse(Product.objects.filter(id='OLD').exists())
        self.assertEqual(Product.objects.count(), 4)
