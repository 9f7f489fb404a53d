"""API routes package"""

from . import health, ingredients, realtime, recipes

__all__ = ["health", "ingredients", "realtime", "recipes"]
