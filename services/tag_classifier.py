"""
Tag classification.

Partitions products into ordering buckets using an ordered list of
tag rules. The first rule whose tag the product carries wins.
"""

from typing import Iterable, Optional
import structlog

from models.catalog import Product
from models.resort import TagBuckets
from models.rules import TagPosition, TagRule

logger = structlog.get_logger(__name__)


def bucket_for(product: Product, rules: list[TagRule]) -> Optional[TagPosition]:
    """
    Position of the first matching rule, or None.

    Tag comparison is exact and case-sensitive.
    """
    tags = product.tag_set
    if not tags:
        return None
    for rule in rules:
        if rule.tag_name in tags:
            return rule.position
    return None


def classify(products: Iterable[Product], rules: list[TagRule]) -> TagBuckets:
    """
    Split products into top / after_new / before_out_of_stock / bottom /
    unclassified.

    Buckets keep the input order. A product appearing twice in the input
    is classified once.
    """
    buckets = TagBuckets()
    seen: set[str] = set()

    for product in products:
        if product.id in seen:
            continue
        seen.add(product.id)

        position = bucket_for(product, rules)
        if position is None:
            buckets.unclassified.append(product.id)
        else:
            buckets.for_position(position).append(product.id)

    logger.debug(
        "products_classified",
        top=len(buckets.top),
        after_new=len(buckets.after_new),
        before_out_of_stock=len(buckets.before_out_of_stock),
        bottom=len(buckets.bottom),
        unclassified=len(buckets.unclassified)
    )

    return buckets
