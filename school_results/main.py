from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from school_results.api.api import api_router
from school_results.api.schemas.mark import MARK_BODY_TAGS
from school_results.core.config import Settings, settings
from school_results.core.database import Database
from school_results.core.logger import logger
from school_results.services.seed import SeedService

# Request locations and union branch tags are not part of a field path.
NON_FIELD_LOCATIONS = {"body", "query", "path", *MARK_BODY_TAGS}


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_settings: Settings = app.state.settings
    database: Database = app.state.database

    logger.info(f"Starting {app_settings.PROJECT_NAME} in {app_settings.ENVIRONMENT} environment")
    logger.debug(f"Database URL: {app_settings.DATABASE_URL}")
    logger.debug(f"Secret Key: {'*' * len(app_settings.SECRET_KEY)} (hidden)")

    try:
        await database.create_all()
        logger.success("Database initialised")
    except Exception as e:
        logger.critical(f"Database initialisation failed: {e}")
        raise

    if app_settings.SEED_DATABASE:
        async with database.sessionmaker() as db:
            await SeedService.seed(app_settings, db)
        logger.info("Seed data checked")

    yield

    logger.info(f"Shutting down {app_settings.PROJECT_NAME}")
    await database.dispose()
    logger.debug("Database engine disposed")


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {"msg": "Invalid request", "loc": ()}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in NON_FIELD_LOCATIONS)
    logger.warning(f"[VALIDATION] {request.method} {request.url.path}: {field} - {first.get('msg')}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": first.get("msg"), "field": field},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal Server Error"},
    )


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings

    app = FastAPI(title=app_settings.PROJECT_NAME, version="1.0.0", lifespan=lifespan)
    app.state.settings = app_settings
    app.state.database = Database(app_settings.DATABASE_URL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(api_router, prefix=app_settings.API_PREFIX)
    return app


app = create_app()
