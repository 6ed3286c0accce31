import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder

from app.core.config import Settings
from app.core.logging_config import setup_logging
from app.database import Database
from app.routes.auth.auth_routes import router as auth_router
from app.routes.auth.user_routes import router as user_router
from app.routes.contest.contest_routes import router as contest_router
from app.routes.contest.submission_routes import router as submission_router
from app.routes.contest.leaderboard_routes import router as leaderboard_router
from app.routes.payment.payment_routes import router as payment_router
from app.services.auth.security import TokenService
from app.services.payment.gateways.base import BasePaymentGateway
from app.services.payment.gateways.factory import PaymentGatewayFactory
from app.utils.exceptions import AppError
from app.utils.response import error_response, success_response, validation_error_response

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    payment_gateway: Optional[BasePaymentGateway] = None
) -> FastAPI:
    """
    Build the API application.

    ``database`` and ``payment_gateway`` are normally created from
    ``settings``; tests pass their own instances instead.
    """
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan events for the application"""
        # Startup
        if app.state.database is None:
            app.state.database = Database.from_settings(settings)
        await app.state.database.create_indexes()
        logger.info("%s %s started", settings.app_name, settings.app_version)

        yield
        # Shutdown
        app.state.database.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="ContestHub API with Users, Contests, Payments, Submissions and Leaderboard",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.database = database
    app.state.token_service = TokenService.from_settings(settings)
    app.state.payment_gateway = (
        payment_gateway if payment_gateway is not None
        else PaymentGatewayFactory.from_settings(settings)
    )
    if app.state.payment_gateway is None:
        logger.warning("[WARN] STRIPE_SECRET_KEY not set; payment intents are disabled")

    # In development, allow all origins for easier testing
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins if not settings.debug else ["*"],
        allow_credentials=not settings.debug,  # Can't use credentials with wildcard origin
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return error_response(message=exc.message, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return validation_error_response(errors=jsonable_encoder(exc.errors()))

    for router in (
        auth_router,
        user_router,
        contest_router,
        submission_router,
        leaderboard_router,
        payment_router,
    ):
        app.include_router(router, prefix=settings.api_prefix)

    @app.get("/")
    async def read_root():
        """Root endpoint"""
        return success_response(
            message=f"{settings.app_name} Server is Running",
            data={"service": settings.app_name, "version": settings.app_version}
        )

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return success_response(message="OK", data={"status": "healthy"})

    return app


app = create_app()


def run():
    """Serve the API with uvicorn on the configured port"""
    settings = app.state.settings
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)
