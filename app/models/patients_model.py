# app/models/patients_model.py

from pydantic import BaseModel
from typing import Optional


class PatientSummary(BaseModel):
    """Patient fields shown alongside an appointment"""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None
