from datetime import datetime, timezone
from decimal import Decimal
import logging
from typing import Any, Dict, List

from fastapi import HTTPException
from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import fetch
from app.core.exceptions import ClientError, InternalError, NotFound
from app.core.retry import execute_with_retry, run_once
from app.models.client_models import Client
from app.models.staff_models import SalesRep, Supervisor
from app.models.quotation_models import (
    Quotation, QuotationProduct,
    VAT_RATE, PENDING, DEFAULT_STATUS, DELIVERED_STATUS,
)
from app.schemas.quotation_schema import (
    QuotationDetailOut,
    QuotationUpdate,
    QuotationUpdateResponse,
    QuotationExportResponse,
    ExportedQuotation,
    MessageResponse,
    QuotationProductIn,
)
from app.utils.decimal_utils import to_decimal, to_money
from app.utils.revision import next_custom_id

logger = logging.getLogger(__name__)

QUANTITY_STEP = Decimal("0.001")

# Column limits: Numeric(14, 2) for money, Numeric(14, 3) for quantities
MAX_AMOUNT = Decimal("1e12")
MAX_QUANTITY = Decimal("1e11")

CLIENT_COLUMNS = (
    Client.company_name, Client.client_name, Client.phone_number,
    Client.tax_number, Client.branch_number, Client.latitude, Client.longitude,
    Client.street, Client.city, Client.region,
)


def _require_id(quotation_id) -> None:
    if quotation_id is None or quotation_id == "":
        raise ClientError("Missing quotation ID")


# --------------------------
# Line pricing
# --------------------------
def price_line(price: Any, quantity: Any) -> Dict[str, Decimal]:
    """
    Price one line item. VAT is 15% of price * quantity and the subtotal
    is price * quantity + VAT. Non-numeric input counts as 0.
    """
    raw_price, raw_quantity = to_decimal(price), to_decimal(quantity)
    if abs(raw_price) >= MAX_AMOUNT or abs(raw_quantity) >= MAX_QUANTITY:
        raise ClientError(
            "Price or quantity out of range",
            details={"price": str(price), "quantity": str(quantity)},
        )

    unit_price = to_money(raw_price)
    qty = raw_quantity.quantize(QUANTITY_STEP)
    line_total = to_money(unit_price * qty)
    vat = to_money(line_total * VAT_RATE)
    subtotal = line_total + vat
    if abs(subtotal) >= MAX_AMOUNT:
        raise ClientError("Line total out of range", details={"subtotal": str(subtotal)})
    return {
        "price": unit_price,
        "quantity": qty,
        "line_total": line_total,
        "vat": vat,
        "subtotal": subtotal,
    }


def compute_totals(lines: List[Dict[str, Decimal]]) -> Dict[str, Decimal]:
    total_price = sum((line["line_total"] for line in lines), Decimal("0.00"))
    total_vat = sum((line["vat"] for line in lines), Decimal("0.00"))
    if abs(total_price + total_vat) >= MAX_AMOUNT:
        raise ClientError("Quotation total out of range")
    return {
        "total_price": total_price,
        "total_vat": total_vat,
        "total_subtotal": total_price + total_vat,
    }


# --------------------------
# GET SINGLE QUOTATION (aggregate view)
# --------------------------
async def fetch_quotation_detail(db: AsyncSession, quotation_id: int) -> Dict[str, Any]:
    """
    Header + client + supervisor name, then line items, then the sales rep.
    Returns a flat dict; raises NotFound before touching the other tables.
    """
    _require_id(quotation_id)
    try:
        header_stmt = (
            select(
                *Quotation.__table__.c,
                *CLIENT_COLUMNS,
                Supervisor.name.label("supervisor_name"),
            )
            .join(Client, Quotation.client_id == Client.id)
            .outerjoin(Supervisor, Quotation.supervisor_id == Supervisor.id)
            .where(Quotation.id == quotation_id)
        )
        header = (await fetch(db, header_stmt)).mappings().first()
        if header is None:
            raise NotFound("Quotation not found")

        products_stmt = (
            select(*QuotationProduct.__table__.c)
            .where(QuotationProduct.quotation_id == quotation_id)
            .order_by(QuotationProduct.id)
        )
        products = (await fetch(db, products_stmt)).mappings().all()

        sales_rep = None
        if header["sales_rep_id"] is not None:
            sales_rep_stmt = (
                select(SalesRep.name, SalesRep.email, SalesRep.phone)
                .where(SalesRep.id == header["sales_rep_id"])
            )
            sales_rep = (await fetch(db, sales_rep_stmt)).mappings().first()

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to read quotation %s", quotation_id)
        raise InternalError(details=str(e))

    detail = dict(header)
    detail["products"] = [dict(p) for p in products]
    detail["salesRep"] = dict(sales_rep) if sales_rep else None
    return detail


async def get_quotation(db: AsyncSession, quotation_id: int) -> QuotationDetailOut:
    detail = await fetch_quotation_detail(db, quotation_id)
    return QuotationDetailOut.model_validate(detail)


# --------------------------
# UPDATE QUOTATION (new revision)
# --------------------------
async def _replace_line_items(
    db: AsyncSession,
    quotation_id: int,
    products: List[QuotationProductIn],
    lines: List[Dict[str, Decimal]],
) -> None:
    await run_once(db.execute(
        delete(QuotationProduct).where(QuotationProduct.quotation_id == quotation_id)
    ))
    rows = [
        {
            "quotation_id": quotation_id,
            "section": product.section,
            "type": product.type,
            "description": product.description,
            "quantity": line["quantity"],
            "price": line["price"],
            "vat": line["vat"],
            "subtotal": line["subtotal"],
        }
        for product, line in zip(products, lines)
    ]
    await run_once(db.execute(insert(QuotationProduct), rows))


async def update_quotation(
    db: AsyncSession, quotation_id: int, data: QuotationUpdate
) -> QuotationUpdateResponse:
    """
    Write a new revision of a quotation in one transaction.

    Every revision bumps the custom_id, recomputes the totals and sends the
    quotation back to "pending" for storekeeper, supervisor and manager.
    """
    _require_id(quotation_id)
    # Bad amounts are rejected before the transaction starts
    replace_products = bool(data.products)
    if replace_products:
        lines = [price_line(p.price, p.quantity) for p in data.products]

    try:
        current = (await run_once(db.execute(
            select(Quotation.custom_id)
            .where(Quotation.id == quotation_id)
            .with_for_update()
        ))).first()
        if current is None:
            raise NotFound("Quotation not found")

        new_custom_id = next_custom_id(current.custom_id)
        status = data.status if data.status is not None else DEFAULT_STATUS
        now = datetime.now(timezone.utc)

        if not replace_products:
            stored = (await run_once(db.execute(
                select(QuotationProduct.price, QuotationProduct.quantity)
                .where(QuotationProduct.quotation_id == quotation_id)
            ))).all()
            lines = [price_line(row.price, row.quantity) for row in stored]
        totals = compute_totals(lines)

        values = {
            "status": status,
            "storekeeperaccept": PENDING,
            "supervisoraccept": PENDING,
            "manageraccept": PENDING,
            "updated_at": now,
            "custom_id": new_custom_id,
            **totals,
        }
        if data.client_id is not None:
            values["client_id"] = data.client_id
        for field in ("delivery_date", "delivery_type", "notes", "storekeeper_notes"):
            if field in data.model_fields_set:
                values[field] = getattr(data, field) or None
        # Never cleared once set
        if status == DELIVERED_STATUS:
            values["actual_delivery_date"] = now

        await run_once(db.execute(
            update(Quotation).where(Quotation.id == quotation_id).values(**values)
        ))

        if replace_products:
            await _replace_line_items(db, quotation_id, data.products, lines)

        await run_once(db.commit())

    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Revision of quotation %s rolled back", quotation_id)
        raise InternalError(details=str(e))

    logger.info(
        "Quotation %s revised to '%s' (total %.2f)",
        quotation_id, new_custom_id, totals["total_subtotal"],
    )
    return QuotationUpdateResponse(
        message="Quotation and products updated successfully",
        custom_id=new_custom_id,
    )


# --------------------------
# MARK QUOTATION AS EXPORTED
# --------------------------
async def mark_quotation_exported(db: AsyncSession, quotation_id: int) -> QuotationExportResponse:
    _require_id(quotation_id)
    stmt = (
        update(Quotation)
        .where(Quotation.id == quotation_id)
        .values(exported=True, updated_at=datetime.now(timezone.utc))
    )
    try:
        # Setting the flag is idempotent, so a blind retry is safe here
        result = await execute_with_retry(lambda: db.execute(stmt), on_retry=db.rollback)
        if result.rowcount == 0:
            raise NotFound("Quotation not found")
        await run_once(db.commit())
    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to mark quotation %s as exported", quotation_id)
        raise InternalError(details=str(e))

    return QuotationExportResponse(
        message="Quotation marked as exported",
        quotation=ExportedQuotation(id=quotation_id, exported=True),
    )


# --------------------------
# DELETE QUOTATION
# --------------------------
async def delete_quotation(db: AsyncSession, quotation_id: int) -> MessageResponse:
    """Hard delete of the quotation and its line items, in one transaction."""
    _require_id(quotation_id)
    try:
        await run_once(db.execute(
            delete(QuotationProduct).where(QuotationProduct.quotation_id == quotation_id)
        ))
        result = await run_once(db.execute(
            delete(Quotation).where(Quotation.id == quotation_id)
        ))
        if result.rowcount == 0:
            raise NotFound("Quotation not found")
        await run_once(db.commit())
    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.exception("Failed to delete quotation %s", quotation_id)
        raise InternalError(details=str(e))

    logger.info("Quotation %s deleted", quotation_id)
    return MessageResponse(message="Quotation and associated products deleted successfully")
