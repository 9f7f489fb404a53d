"""MongoDB adapter - owns the process-wide client connection.
"""

from typing import Optional
import logging
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger("dynamicrecipes.mongo")

_client: Optional[MongoClient] = None
_db: Optional[Database] = None


# ------------------ Connection ------------------
def connect(uri: str, db_name: str = "Recipe_Service") -> Database:
    """Open the client and confirm the server answers a ping.

    Raises the driver error when the server is unreachable so callers can retry.
    """
    global _client, _db
    client = MongoClient(uri)
    try:
        client.admin.command("ping")
    except PyMongoError:
        client.close()
        raise
    _client = client
    _db = client[db_name]
    logger.info("Connected to MongoDB (database: %s)", db_name)
    return _db


def get_db() -> Database:
    """Handle used by repositories. Raises if connect() has not run yet."""
    if _db is None:
        raise RuntimeError("MongoDB is not initialized yet.")
    return _db


def ping() -> bool:
    """Cheap liveness probe for the health endpoint."""
    if _client is None:
        return False
    try:
        _client.admin.command("ping")
        return True
    except PyMongoError:
        logger.warning("MongoDB ping failed", exc_info=True)
        return False


def close():
    """Close MongoDB connection."""
    global _client, _db
    try:
        if _client is not None:
            _client.close()
            logger.info("MongoDB client closed")
    finally:
        _client = None
        _db = None
