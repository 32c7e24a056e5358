from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vapecave.api.routes import auth, blog, brands, newsletter, products, store_locations
from vapecave.core.config import get_settings
from vapecave.core.exceptions import ConfigurationError, register_exception_handlers
from vapecave.core.logging import configure_logging
from vapecave.core.middleware import RequestContextMiddleware
from vapecave.services.mail import Mailer
from vapecave.services.sessions import SessionManager
from vapecave.services.storage import Storage, create_storage


def create_app(storage: Storage | None = None) -> FastAPI:
    """
    Application factory for the Vape Cave catalog backend.
    Storage is chosen once here and shared by every request.
    """

    settings = get_settings()
    configure_logging(settings.log_level, settings.environment)
    if not settings.session_secret:
        raise ConfigurationError("SESSION_SECRET must be set before the API can start.")

    app = FastAPI(
        title=settings.api_title,
        description="Catalog, blog and store-location API for the Vape Cave website.",
        version=settings.api_version,
    )

    app.state.settings = settings
    app.state.storage = storage if storage is not None else create_storage(settings)
    app.state.sessions = SessionManager.from_settings(app.state.storage, settings)
    app.state.mailer = Mailer(settings)

    cors_origins = settings.resolved_cors_origins
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.add_middleware(RequestContextMiddleware)

    for module in (auth, brands, blog, store_locations, products, newsletter):
        app.include_router(module.router)
        app.include_router(module.admin_router)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok", "storage": type(app.state.storage).__name__}

    return app


app = create_app()
