from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class MedicineCreate(BaseModel):
    name: Optional[str] = None
    quantity: int = 0
    expiry_date: Optional[datetime] = None
    description: Optional[str] = None
    created_by: Optional[str] = None


class MedicineUpdate(BaseModel):
    name: Optional[str] = None
    quantity: Optional[int] = None
    expiry_date: Optional[datetime] = None
    description: Optional[str] = None


class MedicineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    quantity: int
    expiry_date: datetime
    description: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
