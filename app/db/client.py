from typing import Optional
from fastapi import Request
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from app.core.logger import logger


class MongoConnection:
    """
    Owns the MongoDB client for the lifetime of the application.

    Created by the app factory, connected in the lifespan handler and
    closed on shutdown. A pre-built client can be passed in (tests use
    an in-memory one).
    """

    def __init__(self, uri: Optional[str] = None, db_name: str = "telecare",
                 timeout_ms: int = 5000, client=None):
        self.uri = uri
        self.db_name = db_name
        self.timeout_ms = timeout_ms
        self.client = client
        self._db: Optional[Database] = None

    def connect(self) -> Database:
        if self._db is not None:
            return self._db

        if self.client is None:
            if not self.uri:
                raise ValueError("MONGO_URI is not set in the environment")
            self.client = MongoClient(self.uri, serverSelectionTimeoutMS=self.timeout_ms)

        self._db = self.client[self.db_name]
        ensure_indexes(self._db)
        logger.info(f"MongoDB connected to {self.db_name}")
        return self._db

    @property
    def db(self) -> Database:
        if self._db is None:
            raise RuntimeError("MongoDB connection has not been initialised")
        return self._db

    def close(self):
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB connection closed")
        self.client = None
        self._db = None


def ensure_indexes(db: Database):
    # One appointment per payment intent
    db.appointments.create_index(
        [("stripe_payment_intent_id", ASCENDING)],
        unique=True,
        sparse=True,
        name="uniq_payment_intent",
    )
    db.appointments.create_index(
        [("doctor_id", ASCENDING), ("status", ASCENDING), ("slot_start", ASCENDING)],
        name="doctor_active_slots",
    )


def get_db(request: Request) -> Database:
    return request.app.state.mongo.db
