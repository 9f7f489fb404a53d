"""Recipe service - expanded recipe listing and recipe writes.

The listing is the expensive read of this API: every recipe references its
ingredients by id, so building "all recipes with ingredients" costs one point
lookup per reference. The result is memoized in an ``AggregateCache`` under
``ALL_RECIPES_KEY`` and dropped by every successful write that could change it.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

import anyio
from anyio import CancelScope
from pymongo.errors import PyMongoError

from app.exceptions import (
    AppError,
    NotFoundError,
    RecipeExpansionError,
    ServiceValidationError,
)
from domain.mappers import CatalogMapper
from domain.schemas.ingredient_schemas import IngredientResponse
from domain.schemas.recipe_schemas import ExpandedRecipe, RecipeCreate
from repositories import IngredientRepository, RecipeRepository
from services.aggregate_cache import AggregateCache

logger = logging.getLogger("dynamicrecipes.recipe")

ALL_RECIPES_KEY = "allRecipes"

RecipeListing = Tuple[ExpandedRecipe, ...]


class RecipeService:
    """Business logic for recipes, including the cached expanded listing."""

    def __init__(
        self,
        recipes: RecipeRepository,
        ingredients: IngredientRepository,
        cache: AggregateCache[RecipeListing],
        timeout_sec: Optional[float] = None,
    ):
        self.recipes = recipes
        self.ingredients = ingredients
        self.cache = cache
        self.timeout_sec = timeout_sec

    # ------------------ Reads ------------------
    async def get_all_expanded_recipes(self) -> List[ExpandedRecipe]:
        """
        Every recipe with its ingredient references resolved, in stored order.

        Served from the cache when possible. On a miss the listing is rebuilt
        with one concurrent unit per recipe; the first failing lookup fails the
        whole listing and nothing is cached, so the next call starts over. A
        listing built while a write invalidated the key is returned but not cached.

        Raises:
            RecipeExpansionError: A reference could not be resolved, or the
                deadline passed
            PyMongoError: Store I/O failure, unchanged
        """
        generation = self.cache.generation(ALL_RECIPES_KEY)
        cached, found = self.cache.load(ALL_RECIPES_KEY)
        if found:
            logger.debug("Recipe listing served from cache")
            return list(cached)

        try:
            with anyio.fail_after(self.timeout_sec):
                expanded = await self._expand_all()
        except TimeoutError as exc:
            logger.warning(
                "Recipe expansion exceeded %.1fs deadline", self.timeout_sec
            )
            raise RecipeExpansionError(
                "Timed out expanding recipes",
                details={"timeout_sec": self.timeout_sec},
                code="RECIPE_EXPANSION_TIMEOUT",
            ) from exc

        logger.info("Expanded %d recipes", len(expanded))
        if not self.cache.store(ALL_RECIPES_KEY, tuple(expanded), if_generation=generation):
            logger.info("Recipes changed during expansion; listing not cached")
        return expanded

    async def get_expanded_recipe(self, recipe_id: str) -> ExpandedRecipe:
        """Expand a single recipe. Not cached."""
        doc = await anyio.to_thread.run_sync(self.recipes.get_by_id, recipe_id)
        try:
            return await self._expand_one(doc)
        except (NotFoundError, ServiceValidationError) as exc:
            raise self._expansion_error(doc, exc) from exc

    async def _expand_all(self) -> List[ExpandedRecipe]:
        docs = await anyio.to_thread.run_sync(self.recipes.find_all)

        # Index-addressed so completion order cannot reorder the output.
        slots: List[Optional[ExpandedRecipe]] = [None] * len(docs)
        failures: List[Tuple[Dict[str, Any], Exception]] = []

        async with anyio.create_task_group() as tg:
            for index, doc in enumerate(docs):
                tg.start_soon(
                    self._expand_into, slots, index, doc, failures, tg.cancel_scope
                )

        if failures:
            doc, first = failures[0]
            if isinstance(first, (NotFoundError, ServiceValidationError)):
                raise self._expansion_error(doc, first) from first
            raise first

        return [slot for slot in slots if slot is not None]

    async def _expand_into(
        self,
        slots: List[Optional[ExpandedRecipe]],
        index: int,
        doc: Dict[str, Any],
        failures: List[Tuple[Dict[str, Any], Exception]],
        scope: CancelScope,
    ) -> None:
        try:
            slots[index] = await self._expand_one(doc)
        except (AppError, PyMongoError) as exc:
            failures.append((doc, exc))
            # First error wins; siblings are cancelled rather than left running.
            scope.cancel()

    async def _expand_one(self, doc: Dict[str, Any]) -> ExpandedRecipe:
        # Sequential within a recipe to keep reference order.
        ingredients: List[IngredientResponse] = []
        for ref in CatalogMapper.recipe_references(doc):
            ingredient = await anyio.to_thread.run_sync(self.ingredients.get_by_id, ref)
            ingredients.append(CatalogMapper.ingredient_to_response(ingredient))
        return CatalogMapper.expanded_recipe(doc, ingredients)

    @staticmethod
    def _expansion_error(doc: Dict[str, Any], exc: AppError) -> RecipeExpansionError:
        details = {
            "recipe_id": str(doc.get("_id", "")),
            "recipe": doc.get("name", ""),
            "reason": exc.message,
        }
        if exc.details:
            details.update(exc.details)
        logger.warning("Recipe expansion failed: %s", details)
        return RecipeExpansionError(details=details)

    # ------------------ Writes ------------------
    async def create_recipes(self, batch: Sequence[RecipeCreate]) -> List[str]:
        """
        Insert recipes after checking every ingredient reference is well formed.

        One malformed reference rejects the whole batch before the store is
        touched. The listing cache is dropped only after the insert succeeds.
        """
        if not batch:
            raise ServiceValidationError("At least one recipe is required")

        for recipe in batch:
            for ref in recipe.ingredients:
                RecipeRepository.to_object_id(ref, field="ingredient_id")

        documents = [CatalogMapper.recipe_to_document(recipe) for recipe in batch]
        inserted = await anyio.to_thread.run_sync(self.recipes.insert_many, documents)
        self.invalidate()
        logger.info("Inserted %d recipes", len(inserted))
        return inserted

    async def delete_recipe(self, recipe_id: str) -> None:
        """Delete a recipe by id. Raises NotFoundError when nothing was deleted."""
        deleted = await anyio.to_thread.run_sync(self.recipes.delete_by_id, recipe_id)
        if deleted == 0:
            raise NotFoundError(
                f"No recipe found with id {recipe_id}", code="RECIPE_NOT_FOUND"
            )
        self.invalidate()
        logger.info("Deleted recipe %s", recipe_id)

    def invalidate(self) -> None:
        """Drop the cached listing; the next read rebuilds it."""
        self.cache.invalidate(ALL_RECIPES_KEY)
