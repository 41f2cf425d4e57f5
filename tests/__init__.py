"""
Test Suite for the Catalog API

Test Organization:
- conftest.py: Shared fixtures (test database, fake cache, client, sample data)
- test_authors.py, test_books.py, test_reviews.py, test_sales.py: CRUD endpoints
- test_cache_aside.py: Cache-aside coordinator
- test_health.py: Backend health monitor and /health
- test_search.py: Search mirror, index path and database fallback
- test_aggregation.py: Top rated / top selling rankings
- test_backends.py: Redis, Elasticsearch and database adapters

Running Tests:
    # Run all tests
    pytest

    # Run with coverage
    pytest --cov=catalog --cov-report=html

    # Run specific file
    pytest tests/test_books.py

    # Run with verbose output
    pytest -v
"""
