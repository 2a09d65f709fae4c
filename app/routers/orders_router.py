# app/routers/orders_router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.order_schemas import AcceptedOrderListResponse
from app.services.order_service import list_storekeeper_accepted_orders

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("/storekeeperaccept", response_model=AcceptedOrderListResponse)
async def storekeeper_accepted_orders_route(
    limit: int = Query(10, ge=1, le=100),
    page: int = Query(1, ge=1),
    query: str = Query("", description="Search by client or company name"),
    db: AsyncSession = Depends(get_db),
):
    return await list_storekeeper_accepted_orders(db, limit=limit, page=page, query=query)
