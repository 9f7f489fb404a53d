"""
Ingredient Repository - Data access layer for ingredient operations (MongoDB integration)
"""

from typing import List, Optional, Dict, Any
import logging
from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import BulkWriteError, DuplicateKeyError

from app.exceptions import ConflictError, NotFoundError
from repositories.base import BaseMongoRepository

logger = logging.getLogger("dynamicrecipes.repositories.ingredients")

DUPLICATE_KEY = 11000


class IngredientRepository(BaseMongoRepository):
    """
    Repository for ingredient documents.

    Documents look like ``{"_id": ObjectId, "name": str, "calories_per_gram": number}``.
    """

    def __init__(self, db: Database, collection_name: str = "Ingredients"):
        super().__init__(db, collection_name)

    def ensure_indexes(self) -> None:
        """Unique name index; delete-by-name relies on names being unique"""
        self.collection.create_index(
            [("name", ASCENDING)], name="name_unique", unique=True
        )

    def get_by_id(self, ingredient_id: str) -> Dict[str, Any]:
        """Get ingredient by ID

        Args:
            ingredient_id: Ingredient id as hex string

        Returns:
            Ingredient document

        Raises:
            ServiceValidationError: If the id is malformed
            NotFoundError: If no ingredient has this id
        """
        oid = self.to_object_id(ingredient_id, field="ingredient_id")
        doc = self.collection.find_one({"_id": oid})
        if doc is None:
            raise NotFoundError(
                f"Ingredient {ingredient_id} not found",
                details={"ingredient_id": str(ingredient_id)},
                code="INGREDIENT_NOT_FOUND",
            )
        return doc

    def insert_many(self, documents: List[Dict[str, Any]]) -> List[str]:
        """Insert ingredients in one batch

        Returns:
            Generated ids as hex strings, in input order

        Raises:
            ConflictError: If an ingredient name already exists
        """
        try:
            result = self.collection.insert_many(documents)
        except BulkWriteError as exc:
            write_errors = exc.details.get("writeErrors", [])
            if any(err.get("code") == DUPLICATE_KEY for err in write_errors):
                raise ConflictError(
                    "Ingredient name already exists",
                    details={"errors": [err.get("errmsg") for err in write_errors]},
                    code="DUPLICATE_INGREDIENT",
                ) from exc
            raise
        return [str(oid) for oid in result.inserted_ids]

    def update_by_id(
        self, ingredient_id: str, fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Overwrite only the given fields

        Returns:
            Updated document, or None if no ingredient has this id
        """
        oid = self.to_object_id(ingredient_id, field="ingredient_id")
        try:
            return self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as exc:
            raise ConflictError(
                "Ingredient name already exists",
                details={"ingredient_id": str(ingredient_id)},
                code="DUPLICATE_INGREDIENT",
            ) from exc

    def delete_by_name(self, name: str) -> int:
        """Delete the ingredient with this exact name; returns deleted count"""
        result = self.collection.delete_one({"name": name})
        logger.debug("delete_by_name(%s) removed %d", name, result.deleted_count)
        return result.deleted_count

    def delete_by_id(self, ingredient_id: str) -> int:
        """Delete by id; returns deleted count"""
        oid = self.to_object_id(ingredient_id, field="ingredient_id")
        return self.collection.delete_one({"_id": oid}).deleted_count
