"""
Integration tests package.

These tests go through the HTTP API end to end with the in-memory
record store, blob store and scorer from tests/conftest.py, so they
need no running services.

To run only integration tests:
    pytest -m integration

To skip them:
    pytest -m "not integration"
"""
