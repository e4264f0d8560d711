from pydantic import BaseModel, ConfigDict
from typing import Any, Optional


class DoctorSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: Optional[str] = None
    specialization: Optional[str] = None
    fees: Optional[float] = None
    hospital_info: Optional[Any] = None
    profile_image: Optional[str] = None
