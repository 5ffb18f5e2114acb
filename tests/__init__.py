"""
Test suite for the bookstore service.

Contains:
- tests/unit/          : Unit tests for the catalogue, cart, checkout,
                         assistant and HTTP routes
"""
