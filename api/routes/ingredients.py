"""
Ingredient routes - listing, lookup and bulk writes.
Successful writes drop the cached ingredient and recipe listings.
"""

from fastapi import APIRouter, Body, Depends, status
from typing import List
import logging

from api.dependencies import get_ingredient_service
from domain.schemas.ingredient_schemas import (
    IngredientCreate,
    IngredientResponse,
    IngredientUpdate,
)
from domain.schemas.recipe_schemas import DeleteResponse, InsertedIdsResponse
from services import IngredientService

router = APIRouter(prefix="/ingredients", tags=["Ingredients"])
logger = logging.getLogger("dynamicrecipes.api.ingredients")


@router.get("", response_model=List[IngredientResponse])
async def list_ingredients(
    service: IngredientService = Depends(get_ingredient_service),
) -> List[IngredientResponse]:
    """List every ingredient (served from cache after the first read)."""
    return await service.list_ingredients()


@router.get("/{ingredient_id}", response_model=IngredientResponse)
async def get_ingredient(
    ingredient_id: str,
    service: IngredientService = Depends(get_ingredient_service),
) -> IngredientResponse:
    return await service.get_ingredient(ingredient_id)


@router.post(
    "", response_model=InsertedIdsResponse, status_code=status.HTTP_201_CREATED
)
async def create_ingredients(
    payload: List[IngredientCreate] = Body(...),
    service: IngredientService = Depends(get_ingredient_service),
) -> InsertedIdsResponse:
    """
    Bulk insert ingredients.

    - **name**: unique ingredient name
    - **calories**: calories per gram
    """
    inserted = await service.create_ingredients(payload)
    return InsertedIdsResponse(inserted_ids=inserted)


@router.put("/{ingredient_id}", response_model=IngredientResponse)
async def update_ingredient(
    ingredient_id: str,
    payload: IngredientUpdate,
    service: IngredientService = Depends(get_ingredient_service),
) -> IngredientResponse:
    """Partial update: only the fields present in the body are overwritten."""
    return await service.update_ingredient(ingredient_id, payload)


@router.delete("/by-id/{ingredient_id}", response_model=DeleteResponse)
async def delete_ingredient_by_id(
    ingredient_id: str,
    service: IngredientService = Depends(get_ingredient_service),
) -> DeleteResponse:
    await service.delete_ingredient_by_id(ingredient_id)
    return DeleteResponse(message="Ingredient successfully deleted", deleted=ingredient_id)


@router.delete("/{name}", response_model=DeleteResponse)
async def delete_ingredient_by_name(
    name: str,
    service: IngredientService = Depends(get_ingredient_service),
) -> DeleteResponse:
    """Delete by exact name. The path segment is URL-decoded (``olive%20oil``)."""
    await service.delete_ingredient_by_name(name)
    return DeleteResponse(message="Ingredient successfully deleted", deleted=name)
