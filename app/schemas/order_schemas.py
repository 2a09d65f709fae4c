# app/schemas/order_schemas.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class DeliveryLocation(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None


class AcceptedOrderOut(BaseModel):
    id: int
    order_number: Optional[str] = None
    client_id: int
    status: str
    storekeeperaccept: str
    supervisoraccept: str
    manageraccept: str
    actual_delivery_date: Optional[datetime] = None
    total_price: Optional[float] = None
    created_at: Optional[datetime] = None

    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    client_company: Optional[str] = None
    client_branch: Optional[str] = None
    client_tax: Optional[str] = None
    client_latitude: Optional[float] = None
    client_longitude: Optional[float] = None
    client_street: Optional[str] = None
    client_city: Optional[str] = None
    client_region: Optional[str] = None

    deliveryLocations: List[DeliveryLocation] = []


class AcceptedOrderListResponse(BaseModel):
    orders: List[AcceptedOrderOut]
    totalCount: int
    currentPage: int
    totalPages: int
    hasMore: bool
