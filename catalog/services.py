"""
Catalog Service Layer - product listing and batch updates.

Batch updates run in a single transaction: one failing row rolls back
every row already written in the same request.
"""
import logging
from typing import Dict, List

from django.db import DEFAULT_DB_ALIAS, transaction

from .models import Product

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('name', 'price', 'category', 'quantity')


def list_products(using: str = DEFAULT_DB_ALIAS) -> List[Product]:
    """Return every product in the catalog, without filtering."""
    return list(Product.objects.using(using).order_by('id'))


def _update_product(update: Dict, using: str) -> int:
    fields = {name: update[name] for name in UPDATABLE_FIELDS}
    return Product.objects.using(using).filter(id=update['id']).update(**fields)


def update_products(updates: List[Dict], using: str = DEFAULT_DB_ALIAS) -> int:
    """
    Replace name, price, category and quantity for a batch of products.

    Args:
        updates: List of dicts with 'id' plus every updatable field
        using: Database alias to run against

    Returns:
        Number of product rows updated

    Raises:
        DatabaseError: If any row fails; nothing from the batch is kept
    """
    updated = 0
    with transaction.atomic(using=using):
        for update in updates:
            rows = _update_product(update, using)
            if not rows:
                logger.warning(f"Catalog update skipped unknown product {update['id']}")
            updated += rows

    logger.info(f"Catalog update applied to {updated} of {len(updates)} products")
    return updated
