"""
Recipe routes - expanded recipe listing and recipe writes.
"""

from fastapi import APIRouter, Body, Depends, status
from typing import List
import logging

from api.dependencies import get_recipe_service
from domain.schemas.recipe_schemas import (
    DeleteResponse,
    ExpandedRecipe,
    InsertedIdsResponse,
    RecipeCreate,
)
from services import RecipeService

router = APIRouter(prefix="/recipes", tags=["Recipes"])
logger = logging.getLogger("dynamicrecipes.api.recipes")


@router.get("", response_model=List[ExpandedRecipe])
async def list_recipes(
    service: RecipeService = Depends(get_recipe_service),
) -> List[ExpandedRecipe]:
    """
    All recipes with their ingredients expanded, in stored order.

    Fails as a whole if any ingredient reference cannot be resolved.
    """
    return await service.get_all_expanded_recipes()


@router.get("/{recipe_id}", response_model=ExpandedRecipe)
async def get_recipe(
    recipe_id: str,
    service: RecipeService = Depends(get_recipe_service),
) -> ExpandedRecipe:
    return await service.get_expanded_recipe(recipe_id)


@router.post(
    "", response_model=InsertedIdsResponse, status_code=status.HTTP_201_CREATED
)
async def create_recipes(
    payload: List[RecipeCreate] = Body(...),
    service: RecipeService = Depends(get_recipe_service),
) -> InsertedIdsResponse:
    """
    Bulk insert recipes.

    Every entry of **ingredients** must be a well-formed ingredient id;
    one malformed id rejects the whole batch.
    """
    inserted = await service.create_recipes(payload)
    return InsertedIdsResponse(inserted_ids=inserted)


@router.delete("/{recipe_id}", response_model=DeleteResponse)
async def delete_recipe(
    recipe_id: str,
    service: RecipeService = Depends(get_recipe_service),
) -> DeleteResponse:
    await service.delete_recipe(recipe_id)
    return DeleteResponse(message="Recipe successfully deleted", deleted=recipe_id)
