"""
Management command to seed the catalog with sample products.

Generates products spread across the Premium, Regular and Budget
categories, each with some stock on hand.

Usage:
    python manage.py seed_products
    python manage.py seed_products --clear  # Clear existing data first
"""
import random
from decimal import Decimal
from django.core.management.base import BaseCommand
from django.db import transaction

from catalog.models import Product


class Command(BaseCommand):
    help = 'Seed the database with sample catalog products'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing orders and products before seeding',
        )
        parser.add_argument(
            '--count',
            type=int,
            default=100,
            help='Number of products to create (default: 100)',
        )

    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self._clear_data()

        self.stdout.write('Starting catalog seeding...')

        with transaction.atomic():
            self._create_products(options['count'])

        self.stdout.write(self.style.SUCCESS('Catalog seeding completed successfully!'))

    def _clear_data(self):
        """Clear all existing data."""
        from orders.models import OrderProduct, Order

        OrderProduct.objects.all().delete()
        Order.objects.all().delete()
        Product.objects.all().delete()

        self.stdout.write(self.style.WARNING('All existing data cleared.'))

    def _create_products(self, count):
        """Create sample products with realistic data."""
        base_names = [
            'Wireless Headphones', 'Bluetooth Speaker', 'USB-C Cable',
            'Power Bank', 'Smart Watch', 'Laptop Stand', 'Webcam HD',
            'Gaming Mouse', 'Mechanical Keyboard', 'Desk Lamp',
            'Yoga Mat', 'Water Bottle', 'Hiking Backpack', 'Coffee Grinder',
        ]

        # Price band per category, in dollars
        price_ranges = {
            Product.Category.PREMIUM: (150, 500),
            Product.Category.REGULAR: (20, 150),
            Product.Category.BUDGET: (2, 20),
        }

        start = self._next_seed_number()
        products = []

        for i in range(start, start + count):
            category = random.choice(list(price_ranges))
            low, high = price_ranges[category]

            products.append(Product(
                id=f"P{i:05d}",
                name=f"{category.label} {random.choice(base_names)} v{random.randint(1, 99)}",
                price=Decimal(str(round(random.uniform(low, high), 2))),
                category=category,
                quantity=random.randint(0, 200)
            ))

        Product.objects.bulk_create(products)

        self.stdout.write(self.style.SUCCESS(f'Created {len(products)} products'))
        return products

    def _next_seed_number(self):
        """Return the number after the highest existing seeded id (P00042 -> 43)."""
        seeded_ids = Product.objects.filter(id__regex=r'^P[0-9]{5}$').values_list('id', flat=True)
        return max((int(product_id[1:]) for product_id in seeded_ids), default=0) + 1
