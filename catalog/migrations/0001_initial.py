from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.CharField(help_text='Unique product identifier', max_length=64, primary_key=True, serialize=False)),
                ('name', models.CharField(db_index=True, help_text='Product name for display', max_length=200)),
                ('price', models.DecimalField(decimal_places=2, help_text='Unit price (non-negative)', max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('category', models.CharField(choices=[('Premium', 'Premium'), ('Regular', 'Regular'), ('Budget', 'Budget')], db_index=True, default='Regular', help_text='Pricing category', max_length=20)),
                ('quantity', models.PositiveIntegerField(default=0, help_text='Current stock quantity')),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'db_table': 'products',
                'ordering': ['id'],
            },
        ),
    ]
