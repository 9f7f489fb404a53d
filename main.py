"""
Dynamic Recipes API
Entry point: store connection, broadcast loop lifetime, middleware and routes.

Run with ``python main.py`` or ``uvicorn main:app``.
"""

from contextlib import asynccontextmanager
from typing import Optional
import logging

import anyio
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from adapters import mongo_adapter
from api import middleware
from api.routes import health, ingredients, realtime, recipes
from app.config import Settings, settings
from app.exceptions import AppError
from services import Services, build_services

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format=settings.log_format,
)
_logger = logging.getLogger("dynamicrecipes.main")


async def connect_store(config: Settings) -> Services:
    """
    Open MongoDB and build the service container.

    Retries ``db_init_attempts`` times, ``db_init_delay_sec`` apart; the last
    driver error is re-raised so startup fails loudly.
    """
    failure: Optional[PyMongoError] = None

    for attempt in range(1, config.db_init_attempts + 1):
        try:
            db = await anyio.to_thread.run_sync(
                mongo_adapter.connect, config.mongo_uri, config.mongo_db_name
            )
            return await anyio.to_thread.run_sync(build_services, db, config)
        except PyMongoError as exc:
            failure = exc
            _logger.warning(
                "MongoDB not reachable (attempt %d of %d): %s",
                attempt,
                config.db_init_attempts,
                exc,
            )
        if attempt < config.db_init_attempts:
            await anyio.sleep(config.db_init_delay_sec)

    _logger.error("Giving up on MongoDB after %d attempts", config.db_init_attempts)
    raise failure


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: reuse ``app.state.services`` when it is already set, otherwise
    connect the store. The broadcast loop runs until shutdown.
    """
    _logger.info("%s starting (%s)", settings.app_name, settings.environment.value)

    services: Optional[Services] = getattr(app.state, "services", None)
    if services is None:
        services = await connect_store(settings)
        app.state.services = services
        _logger.info("Connected to %s", settings.mongo_db_name)

    async with anyio.create_task_group() as tg:
        tg.start_soon(services.hub.run)
        try:
            yield
        finally:
            _logger.info("%s stopping", settings.app_name)
            await services.hub.close()
            tg.cancel_scope.cancel()

    try:
        mongo_adapter.close()
    except PyMongoError:
        _logger.exception("MongoDB client did not close cleanly")


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, middleware.validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, middleware.http_exception_handler)
    app.add_exception_handler(AppError, middleware.app_exception_handler)
    app.add_exception_handler(PyMongoError, middleware.store_exception_handler)
    app.add_exception_handler(Exception, middleware.general_exception_handler)


def create_app(config: Settings = settings) -> FastAPI:
    """Build the ASGI application. API docs are disabled in production."""
    docs_prefix = None if config.is_production() else config.api_prefix

    application = FastAPI(
        title=config.api_title,
        version=config.app_version,
        description=config.api_description,
        lifespan=lifespan,
        debug=config.debug,
        openapi_url=None if docs_prefix is None else f"{docs_prefix}/openapi.json",
        docs_url=None if docs_prefix is None else f"{docs_prefix}/docs",
        redoc_url=None if docs_prefix is None else f"{docs_prefix}/redoc",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origin_list(),
        allow_credentials=config.cors_allow_credentials,
        allow_methods=["GET", "PUT", "POST", "DELETE"],
        allow_headers=["*"],
    )
    application.add_middleware(middleware.RequestLoggingMiddleware)
    register_error_handlers(application)

    for module in (health, ingredients, recipes, realtime):
        application.include_router(module.router, prefix=config.api_prefix)

    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development(),
        log_level=settings.log_level.lower(),
    )
