import uvicorn
from fastapi import FastAPI

from fitcoach.api.routes.health import router as health_router
from fitcoach.api.routes.internal_access import router as internal_access_router
from fitcoach.api.routes.internal_bans import router as internal_bans_router
from fitcoach.api.routes.internal_codes import router as internal_codes_router
from fitcoach.api.routes.internal_grants import router as internal_grants_router
from fitcoach.core.config import get_settings
from fitcoach.core.logging import configure_logging


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="FitCoach Access API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.include_router(health_router)
    app.include_router(internal_access_router)
    app.include_router(internal_codes_router)
    app.include_router(internal_grants_router)
    app.include_router(internal_bans_router)
    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "fitcoach.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_env == "dev",
    )


if __name__ == "__main__":
    run()
