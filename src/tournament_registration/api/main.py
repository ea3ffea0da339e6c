import asyncio
import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tournament_registration import __version__
from tournament_registration.api.auth.routes import router as auth_router
from tournament_registration.api.categories.routes import router as categories_router
from tournament_registration.api.gymnasts.routes import router as gymnasts_router
from tournament_registration.api.images.routes import router as images_router
from tournament_registration.api.middleware import (
    AdvancedRateLimitMiddleware,
    InputValidationMiddleware,
    LoggingMiddleware,
    SecurityHeadersMiddleware,
)
from tournament_registration.api.providers import close_providers, get_fig_client, get_image_proxy, warm_fig_cache
from tournament_registration.api.registrations.routes import router as registrations_router
from tournament_registration.api.tournaments.routes import router as tournaments_router
from tournament_registration.config import config
from tournament_registration.db import close_database, validate_database_startup
from tournament_registration.errors import register_exception_handlers

logger = logging.getLogger(__name__)

START_TIME = time.time()

_background_tasks = set()

app = FastAPI(
    title="Panamerican Gymnastics Registration API",
    description="Country-scoped tournament registration for Pan-American aerobic gymnastics",
    version=__version__,
    docs_url="/api/docs" if not config.is_production else None,
    redoc_url="/api/redoc" if not config.is_production else None,
    openapi_url="/openapi.json" if not config.is_production else None,
)

# Security middleware (order matters - last added runs first)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(InputValidationMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Requested-With"],
)

if config.rate_limit_enabled:
    app.add_middleware(AdvancedRateLimitMiddleware, default_calls=100, default_period=60)
app.add_middleware(LoggingMiddleware)

register_exception_handlers(app)

app.include_router(auth_router, prefix="/auth", tags=["Authentication"])
app.include_router(tournaments_router, prefix="/api/v1/tournaments", tags=["Tournaments"])
app.include_router(
    registrations_router,
    prefix="/api/v1/tournaments/{tournament_id}/registrations",
    tags=["Registrations"],
)
app.include_router(gymnasts_router, prefix="/api/v1/gymnasts", tags=["Gymnasts"])
app.include_router(categories_router, prefix="/api/v1/categories", tags=["Categories"])
app.include_router(images_router, prefix="/api/v1/images", tags=["Images"])


@app.on_event("startup")
async def startup_event():
    """Validate database connection on startup."""
    is_valid = await validate_database_startup()
    if not is_valid:
        logger.error("Startup validation failed")
        raise RuntimeError("Database validation failed on startup")
    if config.fig_warmup:
        task = asyncio.create_task(warm_fig_cache(get_fig_client(), get_image_proxy()))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
    logger.info(f"Registration API {__version__} started ({config.environment})")


@app.on_event("shutdown")
async def shutdown_event():
    await close_providers()
    await close_database()


@app.get("/")
async def root():
    return {"message": "Panamerican Gymnastics Registration API", "version": __version__}


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.time() - START_TIME, 3),
        "version": __version__,
    }


def main():
    import uvicorn

    logging.basicConfig(
        level=logging.DEBUG if config.is_development else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
