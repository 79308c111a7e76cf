import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import uvicorn

from donation_api.config import Settings, get_settings
from donation_api.core.exceptions import DonationAPIError
from donation_api.core.gateway import PersistenceGateway
from donation_api.core.geocoding import GeocodeClient
from donation_api.database import create_db_engine, create_session_factory, init_database
from donation_api.routers import auth, donations, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    engine = app.state.engine
    if engine is not None:
        try:
            init_database(engine, create_tables=app.state.settings.auto_migrate)
        except Exception:
            logger.exception("Failed to initialize the database")
            raise
    logger.info(f"{app.state.settings.app_name} ready")

    yield

    await app.state.geocoder.aclose()
    if engine is not None:
        engine.dispose()


async def handle_api_error(request: Request, exc: DonationAPIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"err": jsonable_encoder(exc.detail)})


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Invalid input is reported as a server error, like every other failure
    return JSONResponse(status_code=500, content={"err": jsonable_encoder(exc.errors())})


def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[PersistenceGateway] = None,
    geocoder: Optional[GeocodeClient] = None,
) -> FastAPI:
    """Build the application and its collaborators.

    Args:
        settings: Application settings (loaded from the environment by default)
        gateway: Persistence gateway; built from ``settings.database_url`` when omitted
        geocoder: Geocode client; built from settings when omitted

    Returns:
        FastAPI: Configured application
    """
    settings = settings or get_settings()

    engine = None
    if gateway is None:
        engine = create_db_engine(settings.database_url, ssl_required=settings.database_ssl)
        gateway = PersistenceGateway(create_session_factory(engine))
    if geocoder is None:
        geocoder = GeocodeClient(
            api_key=settings.geocode_api_key,
            base_url=settings.geocode_base_url,
            timeout=settings.geocode_timeout,
        )

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.gateway = gateway
    app.state.geocoder = geocoder

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DonationAPIError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)

    # Include routers
    app.include_router(users.router)
    app.include_router(donations.router)
    app.include_router(auth.router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "service": "donation_match_backend"}

    return app


app = create_app()


def run() -> None:
    """Start the API server on the configured port."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "donation_api.main:app",
        host="0.0.0.0",
        port=settings.port,
        loop="asyncio",  # Explicitly use asyncio instead of auto (which tries uvloop)
    )


if __name__ == "__main__":
    run()
