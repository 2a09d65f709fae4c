# app/routers/drivers_router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.driver_schemas import DriverCreate, DriverCreateResponse, DriverListResponse
from app.services.driver_service import create_driver, list_drivers

router = APIRouter(prefix="/drivers", tags=["Drivers"])


# ---------------------------
# REGISTER DRIVER
# ---------------------------
@router.post("", response_model=DriverCreateResponse)
async def create_driver_route(data: DriverCreate, db: AsyncSession = Depends(get_db)):
    return await create_driver(db, data)


# ---------------------------
# LIST DRIVERS
# ---------------------------
@router.get("", response_model=DriverListResponse)
async def list_drivers_route(
    limit: int = Query(10, description="Page size, capped at 50"),
    page: int = Query(1, description="1-based page number"),
    query: str = Query("", description="Case-insensitive name search"),
    db: AsyncSession = Depends(get_db),
):
    return await list_drivers(db, limit=limit, page=page, query=query)
