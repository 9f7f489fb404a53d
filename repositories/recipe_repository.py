"""
Recipe Repository - Data access layer for recipe operations (MongoDB integration)
"""

from typing import List, Dict, Any
from pymongo.database import Database

from app.exceptions import NotFoundError
from repositories.base import BaseMongoRepository


class RecipeRepository(BaseMongoRepository):
    """
    Repository for recipe documents.

    Recipes store ingredient references only:
    ``{"_id": ObjectId, "name": str, "ingredients": [hex id, ...]}``.
    """

    def __init__(self, db: Database, collection_name: str = "recipes"):
        super().__init__(db, collection_name)

    def get_by_id(self, recipe_id: str) -> Dict[str, Any]:
        """Get recipe by ID

        Raises:
            ServiceValidationError: If the id is malformed
            NotFoundError: If no recipe has this id
        """
        oid = self.to_object_id(recipe_id, field="recipe_id")
        doc = self.collection.find_one({"_id": oid})
        if doc is None:
            raise NotFoundError(
                f"Recipe {recipe_id} not found",
                details={"recipe_id": str(recipe_id)},
                code="RECIPE_NOT_FOUND",
            )
        return doc

    def insert_many(self, documents: List[Dict[str, Any]]) -> List[str]:
        """Insert recipes in one batch; returns generated ids in input order"""
        result = self.collection.insert_many(documents)
        return [str(oid) for oid in result.inserted_ids]

    def delete_by_id(self, recipe_id: str) -> int:
        """Delete recipe by id; returns deleted count"""
        oid = self.to_object_id(recipe_id, field="recipe_id")
        return self.collection.delete_one({"_id": oid}).deleted_count
