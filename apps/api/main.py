"""zoo-auth API entrypoint and HTTP route wiring."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from zoo_auth.application.ports.customer_repository_port import CredentialStoreError
from zoo_auth.application.services.auth_service import CustomerAuthService
from zoo_auth.application.services.credential_service import CredentialService
from zoo_auth.config.settings import load_settings
from zoo_auth.domain.auth.credentials import CredentialInputError
from zoo_auth.infrastructure.db.customer_repository import SqlAlchemyCustomerRepository
from zoo_auth.infrastructure.db.session import create_session_factory
from zoo_auth.infrastructure.http.auth_router import build_auth_router
from zoo_auth.infrastructure.logging import configure_logging
from zoo_auth.infrastructure.security.password_hasher import BcryptPasswordHasher

logger = logging.getLogger(__name__)


def build_auth_service(database_url: str, *, cost_factor: int) -> CustomerAuthService:
    """Build customer auth service with SQLAlchemy-backed dependencies."""

    session_factory = create_session_factory(database_url)
    return CustomerAuthService(
        customers=SqlAlchemyCustomerRepository(session_factory),
        credentials=CredentialService(
            password_hasher=BcryptPasswordHasher(cost_factor=cost_factor),
        ),
    )


def create_app(*, auth_service: CustomerAuthService | None = None) -> FastAPI:
    """Create FastAPI app exposing customer auth and profile routes."""

    if auth_service is None:
        settings = load_settings()
        configure_logging(level=settings.log_level)
        auth_service = build_auth_service(
            settings.database_url,
            cost_factor=settings.bcrypt_cost_factor,
        )

    app = FastAPI()
    app.include_router(build_auth_router(auth_service=auth_service))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        _ = request
        return JSONResponse(status_code=400, content={"detail": _first_error_message(exc)})

    @app.exception_handler(CredentialInputError)
    async def credential_input_error_handler(
        request: Request,
        exc: CredentialInputError,
    ) -> JSONResponse:
        _ = request
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(CredentialStoreError)
    async def credential_store_error_handler(
        request: Request,
        exc: CredentialStoreError,
    ) -> JSONResponse:
        logger.error(
            "credential_store_unavailable method=%s path=%s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


def _first_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}" if location else message


def run_asgi_server(*, host: str, port: int) -> None:
    """Run the API as a long-lived ASGI process using application factory mode."""

    uvicorn.run(
        "apps.api.main:create_app",
        host=host,
        port=port,
        factory=True,
    )


def main() -> None:
    """Run zoo-auth API process."""

    settings = load_settings()
    run_asgi_server(host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
