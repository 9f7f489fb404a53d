"""Pydantic schemas for ingredient requests and responses."""

from typing import Optional
from pydantic import BaseModel, Field, model_validator


class IngredientCreate(BaseModel):
    """One ingredient of a bulk insert request."""

    name: str = Field(min_length=1, description="Ingredient name, unique")
    calories: float = Field(ge=0, description="Calories per gram")


class IngredientUpdate(BaseModel):
    """Partial update; only the supplied fields overwrite stored values."""

    name: Optional[str] = Field(default=None, min_length=1)
    calories: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def at_least_one_field(self):
        if self.name is None and self.calories is None:
            raise ValueError("Provide at least one of: name, calories")
        return self


class IngredientResponse(BaseModel):
    """Ingredient as returned by the API."""

    id: str
    name: str
    calories: float
