"""
Shared test fixtures and utilities for the Dynamic Recipes test suite.

In-memory repositories stand in for MongoDB: they follow the same contract as
the real repositories (same exceptions for malformed ids, missing documents
and duplicate names) and record the calls they receive so tests can tell a
cache hit from a store read.
"""

import json
import time
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import anyio
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.config import settings
from app.exceptions import ConflictError, NotFoundError
from repositories.base import BaseMongoRepository
from services import wire_services
from main import app

# No lifespan here: HTTP tests install services on app.state directly.
client = TestClient(app)


# =============================================================================
# DOCUMENT FACTORIES
# =============================================================================


def make_ingredient_doc(name: str, calories: float = 1.0, oid: Optional[ObjectId] = None) -> Dict[str, Any]:
    return {"_id": oid or ObjectId(), "name": name, "calories_per_gram": calories}


def make_recipe_doc(name: str, ingredient_docs: List[Dict[str, Any]], oid: Optional[ObjectId] = None) -> Dict[str, Any]:
    return {
        "_id": oid or ObjectId(),
        "name": name,
        "ingredients": [str(doc["_id"]) for doc in ingredient_docs],
    }


# =============================================================================
# IN-MEMORY REPOSITORIES
# =============================================================================


class FakeIngredientRepository:
    """Dict-backed stand-in for IngredientRepository.

    ``delays`` maps an ingredient id to seconds slept inside ``get_by_id``
    (these run in worker threads, so sleeping is how completion order is
    shuffled). ``find_all_delay`` holds a listing read after its snapshot is
    taken. ``fail_with`` makes every call raise the given store error.
    """

    to_object_id = staticmethod(BaseMongoRepository.to_object_id)

    def __init__(self, docs=(), delays: Optional[Dict[str, float]] = None):
        self.docs: Dict[ObjectId, Dict[str, Any]] = {doc["_id"]: dict(doc) for doc in docs}
        self.delays = delays or {}
        self.find_all_delay = 0.0
        self.fail_with: Optional[Exception] = None
        self.find_all_calls = 0
        self.lookups: List[str] = []

    def _check_failure(self):
        if self.fail_with is not None:
            raise self.fail_with

    def find_all(self):
        self.find_all_calls += 1
        self._check_failure()
        snapshot = [dict(doc) for doc in self.docs.values()]
        if self.find_all_delay:
            time.sleep(self.find_all_delay)
        return snapshot

    def get_by_id(self, ingredient_id):
        oid = self.to_object_id(ingredient_id, field="ingredient_id")
        self.lookups.append(str(oid))
        delay = self.delays.get(str(oid))
        if delay:
            time.sleep(delay)
        self._check_failure()
        doc = self.docs.get(oid)
        if doc is None:
            raise NotFoundError(
                f"Ingredient {ingredient_id} not found",
                details={"ingredient_id": str(ingredient_id)},
                code="INGREDIENT_NOT_FOUND",
            )
        return dict(doc)

    def insert_many(self, documents):
        self._check_failure()
        existing = {doc["name"] for doc in self.docs.values()}
        if any(doc["name"] in existing for doc in documents):
            raise ConflictError("Ingredient name already exists", code="DUPLICATE_INGREDIENT")
        inserted = []
        for doc in documents:
            stored = {"_id": ObjectId(), **doc}
            self.docs[stored["_id"]] = stored
            inserted.append(str(stored["_id"]))
        return inserted

    def update_by_id(self, ingredient_id, fields):
        oid = self.to_object_id(ingredient_id, field="ingredient_id")
        self._check_failure()
        doc = self.docs.get(oid)
        if doc is None:
            return None
        doc.update(fields)
        return dict(doc)

    def delete_by_name(self, name):
        self._check_failure()
        for oid, doc in list(self.docs.items()):
            if doc["name"] == name:
                del self.docs[oid]
                return 1
        return 0

    def delete_by_id(self, ingredient_id):
        oid = self.to_object_id(ingredient_id, field="ingredient_id")
        self._check_failure()
        return 1 if self.docs.pop(oid, None) is not None else 0


class FakeRecipeRepository:
    """Dict-backed stand-in for RecipeRepository (insertion order = stored order)."""

    to_object_id = staticmethod(BaseMongoRepository.to_object_id)

    def __init__(self, docs=()):
        self.docs: Dict[ObjectId, Dict[str, Any]] = {doc["_id"]: dict(doc) for doc in docs}
        self.fail_with: Optional[Exception] = None
        self.find_all_calls = 0
        self.insert_calls = 0

    def find_all(self):
        self.find_all_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        return [dict(doc) for doc in self.docs.values()]

    def get_by_id(self, recipe_id):
        oid = self.to_object_id(recipe_id, field="recipe_id")
        doc = self.docs.get(oid)
        if doc is None:
            raise NotFoundError(f"Recipe {recipe_id} not found", code="RECIPE_NOT_FOUND")
        return dict(doc)

    def insert_many(self, documents):
        self.insert_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        inserted = []
        for doc in documents:
            stored = {"_id": ObjectId(), **doc}
            self.docs[stored["_id"]] = stored
            inserted.append(str(stored["_id"]))
        return inserted

    def delete_by_id(self, recipe_id):
        oid = self.to_object_id(recipe_id, field="recipe_id")
        return 1 if self.docs.pop(oid, None) is not None else 0


# =============================================================================
# CATALOG FIXTURE
# =============================================================================


def make_catalog(delays: Optional[Dict[str, float]] = None, timeout_sec: Optional[float] = None):
    """
    A small seeded catalog wired into real services.

    Ingredients: tomato, basil, mozzarella, olive oil.
    Recipes (stored order): caprese, bruschetta, pesto.

    Returns:
        SimpleNamespace with the ingredient docs, recipe docs, fake
        repositories and the ``Services`` container.
    """
    tomato = make_ingredient_doc("tomato", 0.18)
    basil = make_ingredient_doc("basil", 0.23)
    mozzarella = make_ingredient_doc("mozzarella", 2.8)
    olive_oil = make_ingredient_doc("olive oil", 8.84)

    caprese = make_recipe_doc("caprese", [tomato, mozzarella, basil])
    bruschetta = make_recipe_doc("bruschetta", [tomato, basil, olive_oil])
    pesto = make_recipe_doc("pesto", [basil, olive_oil])

    ingredient_repo = FakeIngredientRepository(
        [tomato, basil, mozzarella, olive_oil], delays=delays
    )
    recipe_repo = FakeRecipeRepository([caprese, bruschetta, pesto])

    config = settings.model_copy(update={"aggregation_timeout_sec": timeout_sec})
    services = wire_services(ingredient_repo, recipe_repo, config)

    return SimpleNamespace(
        tomato=tomato,
        basil=basil,
        mozzarella=mozzarella,
        olive_oil=olive_oil,
        caprese=caprese,
        bruschetta=bruschetta,
        pesto=pesto,
        ingredient_repo=ingredient_repo,
        recipe_repo=recipe_repo,
        services=services,
    )


@pytest.fixture
def catalog():
    """Seeded catalog installed on the app for HTTP and WebSocket tests."""
    cat = make_catalog()
    app.state.services = cat.services
    yield cat
    del app.state.services


# =============================================================================
# REALTIME FAKES
# =============================================================================


class FakeDisconnect(Exception):
    """Raised by FakeConnection.receive_text once the peer has gone away."""


class FakeConnection:
    """In-memory RealtimeConnection. Frames pushed by the test are read by the hub."""

    def __init__(self, fail_sends: bool = False, send_delay: float = 0):
        self._inbound_send, self._inbound_receive = anyio.create_memory_object_stream(
            max_buffer_size=100
        )
        self.sent: List[str] = []
        self.closed = False
        self.fail_sends = fail_sends
        self.send_delay = send_delay

    async def receive_text(self) -> str:
        try:
            return await self._inbound_receive.receive()
        except (anyio.EndOfStream, anyio.ClosedResourceError):
            if self.closed:
                # Starlette refuses to read a socket the server already closed
                raise RuntimeError("WebSocket is not connected")
            raise FakeDisconnect()

    async def send_text(self, data: str) -> None:
        if self.send_delay:
            await anyio.sleep(self.send_delay)
        if self.fail_sends:
            raise ConnectionResetError("peer went away")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed = True
        await self._inbound_send.aclose()

    async def push(self, frame) -> None:
        """Send a frame from the client side (dicts are JSON encoded)."""
        if not isinstance(frame, str):
            frame = json.dumps(frame)
        await self._inbound_send.send(frame)

    def push_nowait(self, *frames) -> None:
        """Queue several frames at once, without yielding to the hub in between."""
        for frame in frames:
            self._inbound_send.send_nowait(frame if isinstance(frame, str) else json.dumps(frame))

    async def disconnect(self) -> None:
        await self._inbound_send.aclose()

    def received(self) -> List[Dict[str, Any]]:
        return [json.loads(item) for item in self.sent]


async def serve(hub, connection, user_id, errors: Optional[list] = None):
    """Run hub.handle_connection until the fake peer disconnects."""
    try:
        await hub.handle_connection(connection, user_id)
    except FakeDisconnect:
        pass
    except Exception as exc:
        if errors is None:
            raise
        errors.append(exc)
