from enum import Enum
from typing import Optional
from bson import ObjectId
from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.doctor import DoctorSummary
from app.models.patients_model import PatientSummary
from app.utils.date_utils import parse_booking_date, parse_iso_datetime


class ConsultationType(str, Enum):
    VIDEO = "Video Consultation"
    VOICE = "Voice Call"


class AppointmentStatus(str, Enum):
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    REFUNDED = "Refunded"
    FAILED = "Failed"


class PayoutStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"


# Statuses that hold a doctor's slot
ACTIVE_STATUSES = (AppointmentStatus.SCHEDULED, AppointmentStatus.IN_PROGRESS)


class CreateOrderRequest(BaseModel):
    """Body of POST /api/payment/create-order"""
    doctorId: str = Field(..., description="Doctor ObjectId")
    slotStartIso: str = Field(..., description="Slot start, ISO-8601")
    slotEndIso: str = Field(..., description="Slot end, ISO-8601")
    consultationType: ConsultationType
    symptoms: str = Field(..., description="Symptoms description")
    consultationFees: float = Field(..., ge=0, allow_inf_nan=False)
    platformFees: float = Field(..., ge=0, allow_inf_nan=False)
    totalAmount: float = Field(..., ge=0, allow_inf_nan=False)
    date: str = Field(..., description="Booked day, YYYY-MM-DD")

    @field_validator('doctorId')
    @classmethod
    def validate_doctor_id(cls, v):
        if not ObjectId.is_valid(v):
            raise ValueError('valid doctor ID is required')
        return v

    @field_validator('slotStartIso', 'slotEndIso')
    @classmethod
    def validate_slot_time(cls, v):
        try:
            parse_iso_datetime(v)
        except ValueError:
            raise ValueError('valid ISO-8601 time is required')
        return v

    @field_validator('symptoms')
    @classmethod
    def strip_symptoms(cls, v):
        return v.strip()

    @field_validator('date')
    @classmethod
    def validate_date(cls, v):
        try:
            parse_booking_date(v)
        except ValueError:
            raise ValueError('date is required')
        return v

    @model_validator(mode='after')
    def validate_slot_and_amount(self):
        if parse_iso_datetime(self.slotStartIso) >= parse_iso_datetime(self.slotEndIso):
            raise ValueError('slot start must be before slot end')
        # Fees must add up to the charged total, to the minor unit
        if abs(round((self.consultationFees + self.platformFees) * 100) - round(self.totalAmount * 100)) > 0:
            raise ValueError('totalAmount must equal consultationFees + platformFees')
        return self


class CreateOrderResponse(BaseModel):
    clientSecret: str
    paymentIntentId: str
    amount: float
    currency: str


class VerifyPaymentRequest(BaseModel):
    paymentIntentId: str = Field(..., min_length=1, description="Stripe payment intent ID")


class AppointmentOut(BaseModel):
    """Appointment with doctor and patient expanded"""
    id: str
    doctor: Optional[DoctorSummary] = None
    patient: Optional[PatientSummary] = None
    date: Optional[str] = None
    slot_start: str
    slot_end: str
    consultation_type: str
    symptoms: Optional[str] = None
    room_id: str
    status: str
    consultation_fees: float
    platform_fees: float
    total_amount: float
    payment_status: str
    payout_status: str
    payment_method: Optional[str] = None
    stripe_payment_intent_id: Optional[str] = None
    stripe_charge_id: Optional[str] = None
    payment_date: Optional[str] = None
    created_at: Optional[str] = None
