"""
FastAPI RESTful API for the Bookshelf inventory.

This module provides the HTTP surface for:
- Adding, listing, reading, updating and deleting books
- Service health checks
"""
