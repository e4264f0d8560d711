# app/core/config.py

import os
from typing import List
from dotenv import load_dotenv

load_dotenv()


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


class Settings:
    """Runtime configuration read from the environment (and .env when present)"""

    def __init__(self):
        self.APP_NAME = os.getenv("APP_NAME", "Telecare Booking API")
        self.VERSION = os.getenv("APP_VERSION", "1.0.0")
        self.ENV = os.getenv("ENV", "development")

        # MongoDB
        self.MONGO_URI = os.getenv("MONGO_URI")
        self.MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "telecare")
        self.MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", 5000))

        # JWT
        self.JWT_SECRET = os.getenv("JWT_SECRET")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

        # CORS
        self.ALLOWED_ORIGINS = _split_origins(os.getenv("ALLOWED_ORIGINS", "http://localhost:3000"))

        # Stripe
        self.STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
        self.STRIPE_CURRENCY = os.getenv("STRIPE_CURRENCY", "pkr").lower()
        self.STRIPE_TIMEOUT_SECONDS = float(os.getenv("STRIPE_TIMEOUT_SECONDS", 20))
        self.STRIPE_MAX_NETWORK_RETRIES = int(os.getenv("STRIPE_MAX_NETWORK_RETRIES", 2))

        # Booking
        self.BOOKING_LOCK_TTL_SECONDS = float(os.getenv("BOOKING_LOCK_TTL_SECONDS", 30))
        self.BOOKING_LOCK_WAIT_SECONDS = float(os.getenv("BOOKING_LOCK_WAIT_SECONDS", 5))
        self.SYMPTOMS_METADATA_LIMIT = int(os.getenv("SYMPTOMS_METADATA_LIMIT", 500))

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"


settings = Settings()
