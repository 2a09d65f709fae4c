# app/services/order_service.py
from collections import defaultdict
import logging
import math

from fastapi import HTTPException
from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import fetch
from app.core.exceptions import InternalError
from app.models.client_models import Client
from app.models.order_models import Order, OrderLocation
from app.schemas.order_schemas import AcceptedOrderOut, AcceptedOrderListResponse

logger = logging.getLogger(__name__)

ACCEPTED = "accepted"

CLIENT_COLUMNS = (
    Client.client_name.label("client_name"),
    Client.phone_number.label("client_phone"),
    Client.company_name.label("client_company"),
    Client.branch_number.label("client_branch"),
    Client.tax_number.label("client_tax"),
    Client.latitude.label("client_latitude"),
    Client.longitude.label("client_longitude"),
    Client.street.label("client_street"),
    Client.city.label("client_city"),
    Client.region.label("client_region"),
)


# --------------------------
# LIST ORDERS ACCEPTED BY THE STOREKEEPER
# --------------------------
async def list_storekeeper_accepted_orders(
    db: AsyncSession, limit: int = 10, page: int = 1, query: str = ""
) -> AcceptedOrderListResponse:
    """Paginated, searchable by client or company name, with delivery locations attached."""
    offset = (page - 1) * limit
    pattern = f"%{query or ''}%"
    conditions = and_(
        or_(Client.client_name.ilike(pattern), Client.company_name.ilike(pattern)),
        Order.storekeeperaccept == ACCEPTED,
    )

    try:
        count_stmt = (
            select(func.count(Order.id))
            .join(Client, Order.client_id == Client.id)
            .where(conditions)
        )
        total = (await fetch(db, count_stmt)).scalar_one()

        orders_stmt = (
            select(*Order.__table__.c, *CLIENT_COLUMNS)
            .join(Client, Order.client_id == Client.id)
            .where(conditions)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
            .offset(offset)
        )
        orders = [dict(row) for row in (await fetch(db, orders_stmt)).mappings().all()]

        locations = defaultdict(list)
        order_ids = [order["id"] for order in orders]
        if order_ids:
            location_stmt = (
                select(OrderLocation.order_id, OrderLocation.name, OrderLocation.url)
                .where(OrderLocation.order_id.in_(order_ids))
                .order_by(OrderLocation.id)
            )
            for loc in (await fetch(db, location_stmt)).all():
                locations[loc.order_id].append({"name": loc.name, "url": loc.url})
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error fetching storekeeper-accepted orders")
        raise InternalError("Error fetching orders", details=str(e))

    for order in orders:
        order["deliveryLocations"] = locations.get(order["id"], [])

    total_pages = math.ceil(total / limit)
    return AcceptedOrderListResponse(
        orders=[AcceptedOrderOut.model_validate(order) for order in orders],
        totalCount=total,
        currentPage=page,
        totalPages=total_pages,
        hasMore=page < total_pages,
    )
