# app/schemas/driver_schemas.py
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class DriverCreate(BaseModel):
    # Presence and format are checked by the service so every
    # violation comes back as the same 400 shape
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    clerk_id: Optional[str] = Field(default=None, alias="clerkId")
    role: str = "driver"

    class Config:
        populate_by_name = True


class DriverOut(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    role: str
    clerk_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DriverCreateResponse(BaseModel):
    success: bool = True
    message: str
    driver: DriverOut
    welcome_email_sent: bool = False


class DriverListResponse(BaseModel):
    drivers: List[DriverOut]
    totalCount: int
    currentPage: int
    totalPages: int
