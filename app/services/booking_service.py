# app/services/booking_service.py

import secrets
from datetime import datetime, timezone
from typing import Any, Dict
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.errors import (
    Forbidden,
    NotFound,
    PaymentIncomplete,
    SlotNoLongerAvailable,
    SlotUnavailable,
    StorageError,
)
from app.core.logger import logger
from app.crud import appointment_crud, doctor_crud, patient_crud
from app.crud.booking_lock import DoctorBookingLock
from app.models.appointment import (
    AppointmentStatus,
    CreateOrderRequest,
    PaymentStatus,
    PayoutStatus,
)
from app.services.stripe_service import StripeGateway
from app.utils.date_utils import parse_booking_date, parse_iso_datetime, to_storage


def generate_room_id() -> str:
    # 128 random bits
    return f"room_{secrets.token_hex(16)}"


class BookingService:
    """
    Conflict-checked, payment-gated appointment booking.

    Booking happens in two calls: create_booking_intent charges nothing and
    writes nothing locally, finalize_booking turns a succeeded
    PaymentIntent into exactly one appointment.
    """

    def __init__(self, db, gateway: StripeGateway, lock: DoctorBookingLock,
                 symptoms_limit: int = 500):
        if db is None:
            raise ValueError("Database connection is required")
        self.db = db
        self.gateway = gateway
        self.lock = lock
        self.symptoms_limit = symptoms_limit

    def create_booking_intent(self, order: CreateOrderRequest, patient_id: str) -> Dict[str, Any]:
        slot_start = parse_iso_datetime(order.slotStartIso)
        slot_end = parse_iso_datetime(order.slotEndIso)

        try:
            conflict = appointment_crud.has_conflict(self.db, order.doctorId, slot_start, slot_end)
            doctor = doctor_crud.get_doctor(self.db, order.doctorId)
            patient = patient_crud.get_patient(self.db, patient_id)
        except PyMongoError as e:
            logger.error(f"Error loading booking data for doctor {order.doctorId}: {str(e)}")
            raise StorageError("Failed to create payment order")

        if conflict:
            logger.info(f"Slot {order.slotStartIso} - {order.slotEndIso} already booked for doctor {order.doctorId}")
            raise SlotUnavailable("This time slot is already booked")
        if not doctor:
            raise NotFound("Doctor not found")
        if not patient:
            raise NotFound("Patient not found")

        metadata = {
            "doctorId": order.doctorId,
            "patientId": patient_id,
            "doctorName": doctor.get("name", ""),
            "patientName": patient.get("name", ""),
            "consultationType": order.consultationType.value,
            "date": order.date,
            "slotStart": order.slotStartIso,
            "slotEnd": order.slotEndIso,
            # Stripe caps metadata values at 500 characters
            "symptoms": order.symptoms[:self.symptoms_limit],
            "consultationFees": str(order.consultationFees),
            "platformFees": str(order.platformFees),
            "totalAmount": str(order.totalAmount),
        }

        intent = self.gateway.create_payment_intent(
            amount=order.totalAmount,
            metadata=metadata,
            description=f"Consultation with Dr. {doctor.get('name', '')}",
        )

        return {
            "clientSecret": intent.client_secret,
            "paymentIntentId": intent.id,
            "amount": order.totalAmount,
            "currency": self.gateway.currency.upper(),
        }

    def finalize_booking(self, payment_intent_id: str, patient_id: str) -> Dict[str, Any]:
        intent = self.gateway.retrieve_payment_intent(payment_intent_id)

        if not intent.succeeded:
            raise PaymentIncomplete("Payment not completed or failed")

        metadata = intent.metadata
        if metadata.get("patientId") != patient_id:
            logger.warning(f"Patient {patient_id} tried to finalize PaymentIntent {payment_intent_id}")
            raise Forbidden("Access denied")

        try:
            existing = appointment_crud.get_by_payment_intent(self.db, payment_intent_id)
        except PyMongoError as e:
            logger.error(f"Error looking up appointment for {payment_intent_id}: {str(e)}")
            raise StorageError("Failed to verify payment")

        if existing:
            logger.info(f"Appointment {existing['_id']} already exists for {payment_intent_id}")
            return self.populate(existing)

        doctor_id = metadata["doctorId"]

        try:
            with self.lock.hold(doctor_id):
                # A concurrent finalization of this intent may have committed while we waited
                appointment = appointment_crud.get_by_payment_intent(self.db, payment_intent_id)
                if appointment is not None:
                    logger.info(f"Appointment {appointment['_id']} already exists for {payment_intent_id}")
                else:
                    appointment = self._book_paid_slot(intent, patient_id)
                    logger.info(f"Appointment {appointment['_id']} created for PaymentIntent {payment_intent_id}")
        except DuplicateKeyError:
            # A concurrent retry of the same payment won the insert
            appointment = appointment_crud.get_by_payment_intent(self.db, payment_intent_id)
            if appointment is None:
                raise StorageError("Failed to save appointment")
        except PyMongoError as e:
            logger.error(f"Error saving appointment for {payment_intent_id}: {str(e)}")
            raise StorageError("Failed to save appointment")

        return self.populate(appointment)

    def _book_paid_slot(self, intent, patient_id: str) -> dict:
        """Conflict check and insert; the caller holds the doctor's booking lock"""
        metadata = intent.metadata
        doctor_id = metadata["doctorId"]
        slot_start = parse_iso_datetime(metadata["slotStart"])
        slot_end = parse_iso_datetime(metadata["slotEnd"])

        if appointment_crud.has_conflict(self.db, doctor_id, slot_start, slot_end):
            logger.warning(
                f"Paid slot {metadata['slotStart']} for doctor {doctor_id} taken before "
                f"finalizing {intent.id}"
            )
            raise SlotNoLongerAvailable()

        now = datetime.now(timezone.utc)
        document = {
            "doctor_id": ObjectId(doctor_id),
            "patient_id": ObjectId(patient_id),
            "date": to_storage(parse_booking_date(metadata["date"])),
            "slot_start": to_storage(slot_start),
            "slot_end": to_storage(slot_end),
            "consultation_type": metadata["consultationType"],
            "symptoms": metadata.get("symptoms", ""),
            "room_id": generate_room_id(),
            "status": AppointmentStatus.SCHEDULED.value,
            "consultation_fees": float(metadata["consultationFees"]),
            "platform_fees": float(metadata["platformFees"]),
            "total_amount": float(metadata["totalAmount"]),
            "payment_status": PaymentStatus.PAID.value,
            "payout_status": PayoutStatus.PENDING.value,
            "payment_method": "Stripe",
            "stripe_payment_intent_id": intent.id,
            "stripe_charge_id": intent.charge_id,
            "payment_date": to_storage(now),
            "created_at": to_storage(now),
            "updated_at": to_storage(now),
        }
        return appointment_crud.insert_appointment(self.db, document)

    def populate(self, appointment: dict) -> Dict[str, Any]:
        doctor = doctor_crud.get_doctor(self.db, appointment["doctor_id"])
        patient = patient_crud.get_patient(self.db, appointment["patient_id"])
        return appointment_crud.serialize_appointment(
            appointment,
            doctor=doctor_crud.serialize_doctor(doctor) if doctor else None,
            patient=patient_crud.serialize_patient(patient) if patient else None,
        )
