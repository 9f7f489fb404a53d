"""
API dependencies for dependency injection
"""

from fastapi import Depends
from starlette.requests import HTTPConnection

from services import BroadcastHub, IngredientService, RecipeService, Services


def get_services(connection: HTTPConnection) -> Services:
    """
    Service container built at startup, for HTTP and WebSocket routes alike.

    Usage:
        @router.get("/example")
        async def example(services: Services = Depends(get_services)):
            ...
    """
    services = getattr(connection.app.state, "services", None)
    if services is None:
        raise RuntimeError("Services are not initialized yet.")
    return services


def get_ingredient_service(services: Services = Depends(get_services)) -> IngredientService:
    return services.ingredients


def get_recipe_service(services: Services = Depends(get_services)) -> RecipeService:
    return services.recipes


def get_hub(services: Services = Depends(get_services)) -> BroadcastHub:
    return services.hub
