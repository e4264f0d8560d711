from typing import Optional
from bson import ObjectId


def get_doctor(db, doctor_id) -> Optional[dict]:
    if not ObjectId.is_valid(str(doctor_id)):
        return None
    return db.doctors.find_one({"_id": ObjectId(str(doctor_id))})


def serialize_doctor(doc: dict) -> dict:
    return {
        "id": str(doc["_id"]),
        "name": doc.get("name"),
        "specialization": doc.get("specialization"),
        "fees": doc.get("fees"),
        "hospital_info": doc.get("hospital_info"),
        "profile_image": doc.get("profile_image"),
    }
