# app/schemas/quotation_schema.py
from pydantic import BaseModel
from typing import Any, List, Optional
from datetime import datetime

# --------------------------
# Quotation Line Item Schemas
# --------------------------
class QuotationProductIn(BaseModel):
    # price / quantity stay loose: non-numeric input is coerced to 0
    section: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    quantity: Any = None
    price: Any = None

class QuotationProductOut(BaseModel):
    id: int
    quotation_id: int
    section: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    quantity: float
    price: float
    vat: float
    subtotal: float

    class Config:
        from_attributes = True

class SalesRepOut(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True

# --------------------------
# Quotation Schemas
# --------------------------
class QuotationUpdate(BaseModel):
    client_id: Optional[int] = None
    delivery_date: Optional[str] = None
    delivery_type: Optional[str] = None
    notes: Optional[str] = None
    storekeeper_notes: Optional[str] = None
    products: Optional[List[QuotationProductIn]] = None
    status: Optional[str] = None

class QuotationDetailOut(BaseModel):
    # Header
    id: int
    custom_id: str
    client_id: int
    sales_rep_id: Optional[int] = None
    supervisor_id: Optional[int] = None
    delivery_date: Optional[str] = None
    delivery_type: Optional[str] = None
    notes: Optional[str] = None
    storekeeper_notes: Optional[str] = None
    status: str
    storekeeperaccept: str
    supervisoraccept: str
    manageraccept: str
    exported: bool
    total_price: Optional[float] = None
    total_vat: Optional[float] = None
    total_subtotal: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    actual_delivery_date: Optional[datetime] = None

    # Client (flattened)
    company_name: Optional[str] = None
    client_name: Optional[str] = None
    phone_number: Optional[str] = None
    tax_number: Optional[str] = None
    branch_number: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    street: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None

    supervisor_name: Optional[str] = None

    products: List[QuotationProductOut] = []
    salesRep: Optional[SalesRepOut] = None

# --------------------------
# Response Schemas
# --------------------------
class QuotationUpdateResponse(BaseModel):
    message: str
    custom_id: str

class ExportedQuotation(BaseModel):
    id: int
    exported: bool

class QuotationExportResponse(BaseModel):
    message: str
    quotation: ExportedQuotation

class MessageResponse(BaseModel):
    message: str
