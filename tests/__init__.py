"""
Test suite for Collection Resort.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_rule_compositor.py -v
"""
