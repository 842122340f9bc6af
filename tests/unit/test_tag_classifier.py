"""
Unit tests for tag classification.

Run: pytest tests/unit/test_tag_classifier.py -v
"""

from services.tag_classifier import bucket_for, classify
from models.rules import TagPosition, TagRule

from tests.factories import ProductFactory


def rule(tag: str, position: str) -> TagRule:
    return TagRule(tag_name=tag, position=position)


class TestBucketFor:
    """Tests for bucket_for()"""

    def test_first_matching_rule_wins(self):
        """Two rules for the same tag: stored order decides."""
        product = ProductFactory.create(tags=["clearance"])
        rules = [rule("clearance", "bottom"), rule("clearance", "top")]

        assert bucket_for(product, rules) == TagPosition.BOTTOM

    def test_earlier_rule_wins_across_tags(self):
        product = ProductFactory.create(tags=["sale", "hero"])
        rules = [rule("hero", "top"), rule("sale", "bottom")]

        assert bucket_for(product, rules) == TagPosition.TOP

    def test_matching_is_case_sensitive(self):
        product = ProductFactory.create(tags=["Sale"])

        assert bucket_for(product, [rule("sale", "top")]) is None

    def test_untagged_product_is_unclassified(self):
        product = ProductFactory.create(tags=[])

        assert bucket_for(product, [rule("sale", "top")]) is None


class TestClassify:
    """Tests for classify()"""

    def test_splits_products_into_buckets(self):
        # Arrange
        products = [
            ProductFactory.create(id="p1", tags=["hero"]),
            ProductFactory.create(id="p2"),
            ProductFactory.create(id="p3", tags=["clearance"]),
            ProductFactory.create(id="p4", tags=["seasonal"]),
            ProductFactory.create(id="p5", tags=["last-chance"]),
        ]
        rules = [
            rule("hero", "top"),
            rule("seasonal", "after-new"),
            rule("last-chance", "before-out-of-stock"),
            rule("clearance", "bottom"),
        ]

        # Act
        buckets = classify(products, rules)

        # Assert
        assert buckets.top == ["p1"]
        assert buckets.after_new == ["p4"]
        assert buckets.before_out_of_stock == ["p5"]
        assert buckets.bottom == ["p3"]
        assert buckets.unclassified == ["p2"]

    def test_buckets_keep_input_order(self):
        products = [
            ProductFactory.create(id="p3", tags=["hero"]),
            ProductFactory.create(id="p1", tags=["hero"]),
            ProductFactory.create(id="p2", tags=["hero"]),
        ]

        buckets = classify(products, [rule("hero", "top")])

        assert buckets.top == ["p3", "p1", "p2"]

    def test_duplicate_products_classified_once(self):
        product = ProductFactory.create(id="p1", tags=["hero"])

        buckets = classify([product, product], [rule("hero", "top")])

        assert buckets.top == ["p1"]

    def test_in_tag_order(self):
        products = [
            ProductFactory.create(id="p1"),
            ProductFactory.create(id="p2", tags=["clearance"]),
            ProductFactory.create(id="p3", tags=["hero"]),
        ]

        buckets = classify(products, [rule("hero", "top"), rule("clearance", "bottom")])

        assert buckets.in_tag_order() == ["p3", "p2", "p1"]

    def test_no_rules_leaves_everything_unclassified(self):
        products = ProductFactory.create_batch(3, tags=["hero"])

        buckets = classify(products, [])

        assert buckets.unclassified == ["p1", "p2", "p3"]
