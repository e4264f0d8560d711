import datetime
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.middleware.cors import CORSMiddleware

from app.api import payment
from app.core.config import settings
from app.core.errors import BookingError
from app.core.logger import logger
from app.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from app.core.responses import (
    booking_error_handler,
    ok,
    unhandled_error_handler,
    validation_error_handler,
)
from app.db.client import MongoConnection
from app.services.stripe_service import StripeGateway


def create_app(mongo: Optional[MongoConnection] = None,
               payment_gateway: Optional[StripeGateway] = None) -> FastAPI:
    mongo = mongo or MongoConnection(
        uri=settings.MONGO_URI,
        db_name=settings.MONGO_DB_NAME,
        timeout_ms=settings.MONGO_TIMEOUT_MS,
    )
    payment_gateway = payment_gateway or StripeGateway(
        api_key=settings.STRIPE_SECRET_KEY,
        currency=settings.STRIPE_CURRENCY,
        timeout_seconds=settings.STRIPE_TIMEOUT_SECONDS,
        max_network_retries=settings.STRIPE_MAX_NETWORK_RETRIES,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        mongo.connect()
        yield
        mongo.close()

    app = FastAPI(title=settings.APP_NAME, version=settings.VERSION, lifespan=lifespan)
    app.state.mongo = mongo
    app.state.payment_gateway = payment_gateway

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware, debug=not settings.is_production)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )
    logger.info(f"Allowed CORS origins: {settings.ALLOWED_ORIGINS}")

    app.add_exception_handler(BookingError, booking_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(payment.router)

    @app.get("/")
    async def root():
        return {"message": "Telecare Booking API!"}

    @app.get("/health")
    async def health():
        return ok({"time": datetime.datetime.now(datetime.timezone.utc).isoformat()}, "OK")

    return app


app = create_app()
