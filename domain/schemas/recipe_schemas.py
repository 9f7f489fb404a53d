"""Pydantic schemas for recipe requests and the expanded recipe view."""

from pydantic import BaseModel, Field
from typing import List

from domain.schemas.ingredient_schemas import IngredientResponse


class RecipeCreate(BaseModel):
    """One recipe of a bulk insert request.

    ``ingredients`` holds ingredient ids (24-character hex strings) in the
    order they should be listed.
    """

    name: str = Field(min_length=1)
    ingredients: List[str] = Field(default_factory=list)


class ExpandedRecipe(BaseModel):
    """Recipe with every ingredient reference replaced by the ingredient itself."""

    id: str
    name: str
    ingredients: List[IngredientResponse] = Field(default_factory=list)


class InsertedIdsResponse(BaseModel):
    """Ids generated by a bulk insert, in request order."""

    inserted_ids: List[str]


class DeleteResponse(BaseModel):
    message: str
    deleted: str
