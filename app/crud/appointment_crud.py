from datetime import datetime
from typing import Iterable, Optional
from bson import ObjectId

from app.models.appointment import ACTIVE_STATUSES
from app.utils.date_utils import isoformat_utc, to_storage


def _status_values(statuses: Iterable) -> list:
    return [getattr(s, "value", s) for s in statuses]


def find_conflicting_appointment(
        db,
        doctor_id,
        slot_start: datetime,
        slot_end: datetime,
        statuses: Iterable = ACTIVE_STATUSES
) -> Optional[dict]:
    """
    First active appointment of the doctor overlapping [slot_start, slot_end).
    Touching intervals (one ends exactly when the other starts) do not overlap.
    """
    return db.appointments.find_one({
        "doctor_id": ObjectId(doctor_id),
        "status": {"$in": _status_values(statuses)},
        "slot_start": {"$lt": to_storage(slot_end)},
        "slot_end": {"$gt": to_storage(slot_start)},
    })


def has_conflict(db, doctor_id, slot_start: datetime, slot_end: datetime,
                 statuses: Iterable = ACTIVE_STATUSES) -> bool:
    return find_conflicting_appointment(db, doctor_id, slot_start, slot_end, statuses) is not None


def get_by_payment_intent(db, payment_intent_id: str) -> Optional[dict]:
    return db.appointments.find_one({"stripe_payment_intent_id": payment_intent_id})


def insert_appointment(db, document: dict) -> dict:
    result = db.appointments.insert_one(document)
    document["_id"] = result.inserted_id
    return document


def serialize_appointment(appt: dict, doctor: Optional[dict] = None, patient: Optional[dict] = None) -> dict:
    return {
        "id": str(appt["_id"]),
        "doctor": doctor,
        "patient": patient,
        "date": isoformat_utc(appt.get("date")),
        "slot_start": isoformat_utc(appt["slot_start"]),
        "slot_end": isoformat_utc(appt["slot_end"]),
        "consultation_type": appt["consultation_type"],
        "symptoms": appt.get("symptoms"),
        "room_id": appt["room_id"],
        "status": appt["status"],
        "consultation_fees": appt["consultation_fees"],
        "platform_fees": appt["platform_fees"],
        "total_amount": appt["total_amount"],
        "payment_status": appt["payment_status"],
        "payout_status": appt["payout_status"],
        "payment_method": appt.get("payment_method"),
        "stripe_payment_intent_id": appt.get("stripe_payment_intent_id"),
        "stripe_charge_id": appt.get("stripe_charge_id"),
        "payment_date": isoformat_utc(appt.get("payment_date")),
        "created_at": isoformat_utc(appt.get("created_at")),
    }
