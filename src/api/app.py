from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlmodel import SQLModel
from .error import ClientError, ServerError
from src.domain.session_policy import SessionPolicy
import logging

logger = logging.getLogger(__name__)


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = {"code": exc.base_error.code, "message": exc.base_error.message}
    logger.warning(f"Client error: {error_dict}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


async def handle_server_error(request: Request, exc: ServerError):
    if exc.status_code == 503:
        message = exc.base_error.message
    else:
        message = "Internal server error"
    error_dict = {"code": exc.base_error.code, "message": message}
    logger.error(f"Server error: {exc.base_error.code}")
    return JSONResponse(status_code=exc.status_code, content={"error": error_dict})


def build_lifespan(ApplicationConfig):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Refuse to start without a reachable session store
        from src.depends import engine
        from src.domain import entities  # noqa: F401  registers the tables

        async with engine.begin() as conn:
            if ApplicationConfig.AUTO_CREATE_TABLES:
                await conn.run_sync(SQLModel.metadata.create_all)
            await conn.execute(text("SELECT 1"))
        logger.info("Session store ready at %s", engine.url.render_as_string(hide_password=True))
        yield
        await engine.dispose()

    return lifespan


def create_app(ApplicationConfig) -> FastAPI:
    # An invalid session policy must stop the service from starting
    policy = SessionPolicy.from_config(ApplicationConfig)
    logger.info(
        "Session policy: %s",
        {role: rule.model_dump() for role, rule in policy.roles.items()},
    )

    app = FastAPI(
        title="Session Admission Service",
        version="0.1.0",
        lifespan=build_lifespan(ApplicationConfig),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[ApplicationConfig.SESSION_HEADER],
    )

    from src.api.routes import accounts, auth, health_check, sessions

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(sessions.router, tags=["Sessions"])
    app.include_router(accounts.router, tags=["Accounts"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
