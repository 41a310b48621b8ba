"""FastAPI application setup."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from src.auth_api.api.http.app_data import ApplicationDependencies
from src.auth_api.api.http.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from src.auth_api.api.http.routers.auth import handle_auth_error, router_auth
from src.auth_api.api.http.routers.health import router as router_health
from src.auth_api.api.utils.app_startup import configure_logging
from src.auth_api.core.errors import AuthError
from src.auth_api.core.security import PasswordHasher
from src.auth_api.core.services import (
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
    MessageSource,
    SmtpMailService,
    UserCacheInMemory,
)
from src.auth_api.runtime.context import get_config

configure_logging()

__all__ = ["app", "build_dependencies", "create_app", "startup", "shutdown"]


def build_dependencies(
    database_service: DbSessionService | None = None,
) -> ApplicationDependencies:
    """Create the application-wide collaborators from the current configuration."""
    config = get_config()
    return ApplicationDependencies(
        database_service=database_service or DbSessionService(),
        user_cache=UserCacheInMemory(
            maxsize=config.auth.user_cache_size,
            ttl=config.auth.user_cache_ttl_seconds,
        ),
        password_hasher=PasswordHasher(),
        jwt_generation_service=JwtGeneratorService(),
        jwt_verify_service=JwtVerificationService(),
        mail_service=SmtpMailService(config.mail, config.app.frontend_url),
        message_source=MessageSource.from_yaml(
            default_locale=config.auth.default_locale
        ),
    )


async def startup(app: FastAPI) -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    if not config.jwt.secret:
        logger.warning("jwt.secret is not configured; sign-in will fail")

    # dependencies installed before startup (tests) are kept
    if getattr(app.state, "app_dependencies", None) is None:
        deps = build_dependencies()
        if config.database.is_sqlite:
            deps.database_service.create_all()
        app.state.app_dependencies = deps


async def shutdown(app: FastAPI) -> None:
    logger.info("Shutting down application")
    deps: ApplicationDependencies | None = getattr(app.state, "app_dependencies", None)
    if deps is not None:
        deps.database_service.engine.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup(app)
    try:
        yield
    finally:
        await shutdown(app)


def create_app() -> FastAPI:
    config = get_config()
    is_production = config.app.environment == "production"
    cors = config.app.cors

    if is_production and "*" in cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    application = FastAPI(
        title="Auth API",
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )

    # last added runs first: request logging wraps everything
    application.add_middleware(SecurityHeadersMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )
    application.add_middleware(RequestLoggingMiddleware)

    application.include_router(router_auth)
    application.include_router(router_health)
    application.add_exception_handler(AuthError, handle_auth_error)
    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,
    )
