import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storeadmin.config import Settings, get_settings
from storeadmin.core.errors import AppError
from storeadmin.core.logging import setup_logging
from storeadmin.database import Base, engine
from storeadmin.models import import_all_models
from storeadmin.routers import (
    coupons_router,
    discounts_router,
    health_router,
    inventory_router,
    products_router,
)

logger = logging.getLogger(__name__)

setup_logging()
settings: Settings = get_settings()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    import_all_models()
    Base.metadata.create_all(bind=engine)
    logger.info("%s started (%s)", settings.APP_NAME, settings.ENVIRONMENT)
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.warning(
        "%s %s -> %s: %s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.message,
        extra={"details": exc.details},
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": {}},
    )


app.include_router(health_router)
app.include_router(products_router)
app.include_router(inventory_router)
app.include_router(discounts_router)
app.include_router(coupons_router)


__all__ = ["app"]
