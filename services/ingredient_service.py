"""Ingredient service - ingredient master data and its cached listing."""

from typing import List, Sequence, Tuple
import logging

import anyio

from app.exceptions import NotFoundError, ServiceValidationError
from domain.mappers import CatalogMapper
from domain.schemas.ingredient_schemas import (
    IngredientCreate,
    IngredientResponse,
    IngredientUpdate,
)
from repositories import IngredientRepository
from services.aggregate_cache import AggregateCache
from services.recipe_service import ALL_RECIPES_KEY, RecipeListing

logger = logging.getLogger("dynamicrecipes.ingredient")

ALL_INGREDIENTS_KEY = "allIngredients"

IngredientListing = Tuple[IngredientResponse, ...]


class IngredientService:
    """Business logic for ingredients.

    Expanded recipes embed ingredient data, so every successful ingredient
    write drops the recipe listing as well as the ingredient listing.
    """

    def __init__(
        self,
        repository: IngredientRepository,
        cache: AggregateCache[IngredientListing],
        recipes_cache: AggregateCache[RecipeListing],
    ):
        self.repository = repository
        self.cache = cache
        self.recipes_cache = recipes_cache

    async def list_ingredients(self) -> List[IngredientResponse]:
        """All ingredients, served from the cache when possible."""
        generation = self.cache.generation(ALL_INGREDIENTS_KEY)
        cached, found = self.cache.load(ALL_INGREDIENTS_KEY)
        if found:
            return list(cached)

        docs = await anyio.to_thread.run_sync(self.repository.find_all)
        listing = [CatalogMapper.ingredient_to_response(doc) for doc in docs]
        if not self.cache.store(ALL_INGREDIENTS_KEY, tuple(listing), if_generation=generation):
            logger.info("Ingredients changed during read; listing not cached")
        return listing

    async def get_ingredient(self, ingredient_id: str) -> IngredientResponse:
        """
        Get one ingredient.

        Raises:
            ServiceValidationError: Malformed id
            NotFoundError: No ingredient with this id
        """
        doc = await anyio.to_thread.run_sync(self.repository.get_by_id, ingredient_id)
        return CatalogMapper.ingredient_to_response(doc)

    async def create_ingredients(self, batch: Sequence[IngredientCreate]) -> List[str]:
        if not batch:
            raise ServiceValidationError("At least one ingredient is required")
        documents = [CatalogMapper.ingredient_to_document(item) for item in batch]
        inserted = await anyio.to_thread.run_sync(self.repository.insert_many, documents)
        self.invalidate()
        logger.info("Inserted %d ingredients", len(inserted))
        return inserted

    async def update_ingredient(
        self, ingredient_id: str, data: IngredientUpdate
    ) -> IngredientResponse:
        """Overwrite only the supplied fields and return the stored result."""
        fields = CatalogMapper.ingredient_update_fields(data)
        if not fields:
            raise ServiceValidationError("Nothing to update")

        doc = await anyio.to_thread.run_sync(
            self.repository.update_by_id, ingredient_id, fields
        )
        if doc is None:
            raise NotFoundError(
                f"No ingredient found with id {ingredient_id}",
                code="INGREDIENT_NOT_FOUND",
            )
        self.invalidate()
        logger.info("Updated ingredient %s (%s)", ingredient_id, ", ".join(fields))
        return CatalogMapper.ingredient_to_response(doc)

    async def delete_ingredient_by_name(self, name: str) -> None:
        deleted = await anyio.to_thread.run_sync(self.repository.delete_by_name, name)
        if deleted == 0:
            raise NotFoundError(
                f"No ingredient found with name {name!r}", code="INGREDIENT_NOT_FOUND"
            )
        self.invalidate()
        logger.info("Deleted ingredient named %s", name)

    async def delete_ingredient_by_id(self, ingredient_id: str) -> None:
        deleted = await anyio.to_thread.run_sync(
            self.repository.delete_by_id, ingredient_id
        )
        if deleted == 0:
            raise NotFoundError(
                f"No ingredient found with id {ingredient_id}",
                code="INGREDIENT_NOT_FOUND",
            )
        self.invalidate()
        logger.info("Deleted ingredient %s", ingredient_id)

    def invalidate(self) -> None:
        self.cache.invalidate(ALL_INGREDIENTS_KEY)
        self.recipes_cache.invalidate(ALL_RECIPES_KEY)
