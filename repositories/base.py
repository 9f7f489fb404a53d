"""
Base repository for the MongoDB data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

from typing import Any, Dict, List
from abc import ABC
from bson import ObjectId
from bson.errors import InvalidId
from pymongo.database import Database

from app.exceptions import ServiceValidationError


class BaseMongoRepository(ABC):
    """
    Base repository providing common collection access.
    All repositories should inherit from this class.

    Methods are blocking (pymongo); async callers run them in a worker thread.
    """

    def __init__(self, db: Database, collection_name: str):
        self.db = db
        self.collection = db[collection_name]

    @staticmethod
    def to_object_id(value: Any, field: str = "id") -> ObjectId:
        """
        Convert an opaque identifier string to the store-native form.

        Args:
            value: Hex string (or an ObjectId already)
            field: Name used in the error message

        Returns:
            ObjectId

        Raises:
            ServiceValidationError: If the value is not a 24-character hex id
        """
        if isinstance(value, ObjectId):
            return value
        try:
            return ObjectId(value)
        except (InvalidId, TypeError):
            raise ServiceValidationError(
                f"Invalid {field}: {value!r}",
                details={"field": field, "value": str(value)},
                code="INVALID_OBJECT_ID",
            )

    def find_all(self) -> List[Dict[str, Any]]:
        """Fetch every document of the collection (no pagination)"""
        return list(self.collection.find({}))
