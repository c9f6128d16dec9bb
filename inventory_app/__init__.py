"""
Inventory, order and customer management service.

Thin data-access layer over a hosted relational backend, exposed as a
FastAPI application.
"""

__version__ = "1.0.0"
