"""
Pytest configuration for the booking API tests
"""

import os
import sys

# Set test configuration BEFORE importing any app modules
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["LOG_FILE"] = ""
os.environ["ENV"] = "test"
os.environ.pop("STRIPE_SECRET_KEY", None)

# Add parent directory to path to import app modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import itertools
from types import SimpleNamespace
from unittest.mock import patch

import mongomock
import pytest
import stripe
from fastapi.testclient import TestClient

from app.core.security import create_access_token
from app.db.client import MongoConnection
from app.main import create_app
from app.services.stripe_service import StripeGateway


class FakeStripe:
    """In-memory stand-in for the PaymentIntent endpoints"""

    def __init__(self):
        self.intents = {}
        self._ids = itertools.count(1)

    def create(self, amount, currency, metadata, description):
        n = next(self._ids)
        intent = SimpleNamespace(
            id=f"pi_test_{n}",
            client_secret=f"pi_test_{n}_secret_abc",
            status="requires_payment_method",
            amount=amount,
            currency=currency,
            metadata=dict(metadata),
            description=description,
            latest_charge=None,
        )
        self.intents[intent.id] = intent
        return intent

    def retrieve(self, intent_id):
        if intent_id not in self.intents:
            raise stripe.InvalidRequestError(f"No such payment_intent: '{intent_id}'", "intent")
        return self.intents[intent_id]

    def succeed(self, intent_id, charge_id="ch_test_1"):
        intent = self.intents[intent_id]
        intent.status = "succeeded"
        intent.latest_charge = charge_id
        return intent


@pytest.fixture
def fake_stripe():
    fake = FakeStripe()
    with patch("stripe.PaymentIntent.create", side_effect=fake.create) as create_mock, \
            patch("stripe.PaymentIntent.retrieve", side_effect=fake.retrieve) as retrieve_mock:
        fake.create_mock = create_mock
        fake.retrieve_mock = retrieve_mock
        yield fake


@pytest.fixture
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture
def db(mongo_client):
    connection = MongoConnection(db_name="telecare_test", client=mongo_client)
    return connection.connect()


@pytest.fixture
def gateway():
    return StripeGateway(api_key="sk_test_dummy", currency="pkr")


@pytest.fixture
def api_app(mongo_client, gateway):
    return create_app(
        mongo=MongoConnection(db_name="telecare_test", client=mongo_client),
        payment_gateway=gateway,
    )


@pytest.fixture
def client(api_app, fake_stripe):
    with TestClient(api_app) as test_client:
        yield test_client


@pytest.fixture
def doctor(db):
    doc = {
        "name": "Ayesha Khan",
        "specialization": "Cardiology",
        "fees": 1200,
        "hospital_info": {"name": "City Hospital", "city": "Lahore"},
        "profile_image": "https://img.example.com/ayesha.png",
        "email": "ayesha@example.com",
    }
    doc["_id"] = db.doctors.insert_one(doc).inserted_id
    return doc


@pytest.fixture
def patient(db):
    doc = {
        "name": "Ali Raza",
        "email": "ali@example.com",
        "phone": "+923001234567",
        "profile_image": None,
    }
    doc["_id"] = db.patients.insert_one(doc).inserted_id
    return doc


@pytest.fixture
def other_patient(db):
    doc = {"name": "Sara Ahmed", "email": "sara@example.com", "phone": "+923009876543"}
    doc["_id"] = db.patients.insert_one(doc).inserted_id
    return doc


def auth_header(user_id, user_type="patient"):
    token = create_access_token({"id": str(user_id), "type": user_type})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_headers():
    return auth_header


@pytest.fixture
def patient_headers(patient):
    return auth_header(patient["_id"])


@pytest.fixture
def order_payload(doctor):
    return {
        "doctorId": str(doctor["_id"]),
        "slotStartIso": "2030-05-10T10:00:00Z",
        "slotEndIso": "2030-05-10T10:30:00Z",
        "consultationType": "Video Consultation",
        "symptoms": "Chest pain after exercise",
        "consultationFees": 1200,
        "platformFees": 300,
        "totalAmount": 1500.00,
        "date": "2030-05-10",
    }
