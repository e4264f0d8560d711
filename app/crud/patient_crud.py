from typing import Optional
from bson import ObjectId


def get_patient(db, patient_id) -> Optional[dict]:
    if not ObjectId.is_valid(str(patient_id)):
        return None
    return db.patients.find_one({"_id": ObjectId(str(patient_id))})


def serialize_patient(doc: dict) -> dict:
    return {
        "id": str(doc["_id"]),
        "name": doc.get("name"),
        "email": doc.get("email"),
        "phone": doc.get("phone"),
        "profile_image": doc.get("profile_image"),
    }
