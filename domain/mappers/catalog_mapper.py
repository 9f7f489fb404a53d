"""
Catalog domain mappers.
Handles transformation between MongoDB documents and DTOs.
"""

from typing import Any, Dict, List

from domain.schemas.ingredient_schemas import (
    IngredientCreate,
    IngredientResponse,
    IngredientUpdate,
)
from domain.schemas.recipe_schemas import ExpandedRecipe, RecipeCreate

# Stored field name for IngredientCreate.calories
CALORIES_FIELD = "calories_per_gram"


class CatalogMapper:
    """Mapper for ingredient and recipe documents."""

    @staticmethod
    def ingredient_to_response(doc: Dict[str, Any]) -> IngredientResponse:
        return IngredientResponse(
            id=str(doc["_id"]),
            name=doc.get("name", ""),
            calories=doc.get(CALORIES_FIELD, 0),
        )

    @staticmethod
    def ingredient_to_document(data: IngredientCreate) -> Dict[str, Any]:
        return {"name": data.name, CALORIES_FIELD: data.calories}

    @staticmethod
    def ingredient_update_fields(data: IngredientUpdate) -> Dict[str, Any]:
        """Only the fields the caller supplied"""
        fields: Dict[str, Any] = {}
        if data.name is not None:
            fields["name"] = data.name
        if data.calories is not None:
            fields[CALORIES_FIELD] = data.calories
        return fields

    @staticmethod
    def recipe_to_document(data: RecipeCreate) -> Dict[str, Any]:
        return {"name": data.name, "ingredients": list(data.ingredients)}

    @staticmethod
    def recipe_references(doc: Dict[str, Any]) -> List[str]:
        """Ingredient ids referenced by a stored recipe, in order"""
        return [str(ref) for ref in doc.get("ingredients") or []]

    @staticmethod
    def expanded_recipe(
        doc: Dict[str, Any], ingredients: List[IngredientResponse]
    ) -> ExpandedRecipe:
        return ExpandedRecipe(
            id=str(doc["_id"]), name=doc.get("name", ""), ingredients=ingredients
        )
