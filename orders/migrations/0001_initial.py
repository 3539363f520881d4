from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Order',
            fields=[
                ('id', models.CharField(help_text='Generated order identifier', max_length=64, primary_key=True, serialize=False)),
                ('value', models.DecimalField(decimal_places=3, default=Decimal('0.000'), help_text='Total order value after discounts', max_digits=14)),
                ('status', models.CharField(choices=[('Placed', 'Placed'), ('Dispatched', 'Dispatched'), ('Completed', 'Completed'), ('Canceled', 'Canceled')], db_index=True, default='Placed', help_text='Current order status', max_length=20)),
                ('dispatch_date', models.DateField(blank=True, db_column='dispatchDate', help_text='Set only while the order is dispatched', null=True)),
                ('prod_quantity', models.PositiveIntegerField(db_column='prodQuantity', default=0, help_text='Number of order lines (not units)')),
            ],
            options={
                'verbose_name': 'Order',
                'verbose_name_plural': 'Orders',
                'db_table': 'orders',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='OrderProduct',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('order', models.ForeignKey(help_text='Parent order', on_delete=django.db.models.deletion.CASCADE, related_name='product_links', to='orders.order')),
                ('product', models.ForeignKey(help_text='Ordered product', on_delete=django.db.models.deletion.PROTECT, related_name='order_links', to='catalog.product')),
            ],
            options={
                'verbose_name': 'Order Product',
                'verbose_name_plural': 'Order Products',
                'db_table': 'order_products',
                'ordering': ['id'],
            },
        ),
    ]
