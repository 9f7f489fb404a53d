"""
Domain layer - Schemas and document mappers.
"""

from domain import mappers, schemas

__all__ = ["mappers", "schemas"]
