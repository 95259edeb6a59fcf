"""le-route53 tests."""
