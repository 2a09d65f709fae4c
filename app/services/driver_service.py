# app/services/driver_service.py
import logging
import math
import re

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import SEND_WELCOME_EMAIL
from app.core.db import fetch
from app.core.exceptions import ClientError, Conflict, InternalError
from app.core.retry import run_once
from app.models.driver_models import Driver, DRIVER_ROLES
from app.schemas.driver_schemas import (
    DriverCreate, DriverOut, DriverCreateResponse, DriverListResponse
)
from app.utils.clerk_client import create_clerk_user
from app.utils.password import generate_strong_password
from app.utils.sendgrid_mailer import send_welcome_email

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+\Z")
PHONE_PATTERN = re.compile(r"^\+?[0-9\s-]{8,}\Z")

MAX_PAGE_SIZE = 50


# ---------------------------
# Validation
# ---------------------------
def validate_driver(data: DriverCreate) -> None:
    if not data.name or not data.email or not data.phone:
        raise ClientError("Missing required fields")
    if data.role not in DRIVER_ROLES:
        raise ClientError("Invalid role specified")
    if not EMAIL_PATTERN.match(data.email) or not PHONE_PATTERN.match(data.phone):
        raise ClientError("Invalid email or phone number format")


# ---------------------------
# CREATE DRIVER
# ---------------------------
async def create_driver(db: AsyncSession, data: DriverCreate) -> DriverCreateResponse:
    """
    Register a driver/staff account.

    Without a clerkId the account is first created with the identity
    provider using a generated temporary password.
    """
    validate_driver(data)

    temporary_password = None
    try:
        existing = await fetch(db, select(Driver.id).where(Driver.email == data.email))
        if existing.first() is not None:
            raise Conflict("Driver with this email already exists")

        clerk_id = data.clerk_id
        if not clerk_id:
            temporary_password = generate_strong_password()
            clerk_user = await create_clerk_user(data.email, temporary_password, data.name, data.role)
            clerk_id = clerk_user.get("id")

        driver = Driver(
            name=data.name,
            email=data.email,
            phone=data.phone,
            clerk_id=clerk_id,
            role=data.role,
        )
        db.add(driver)
        await run_once(db.commit())
        await db.refresh(driver)

    except HTTPException:
        await db.rollback()
        raise
    except IntegrityError:
        await db.rollback()
        raise Conflict("Driver with this email already exists")
    except Exception as e:
        await db.rollback()
        logger.exception("Error registering driver %s", data.email)
        raise InternalError("Error registering driver", details=str(e))

    logger.info("Driver %s registered with role %s", driver.email, driver.role)

    welcome_email_sent = False
    if SEND_WELCOME_EMAIL and temporary_password:
        try:
            await send_welcome_email(driver.email, driver.name, temporary_password, driver.role)
            welcome_email_sent = True
        except HTTPException as e:
            # The account already exists; report the miss instead of failing
            logger.error("Welcome email to %s failed: %s (%s)", driver.email, e.detail, getattr(e, "details", None))

    return DriverCreateResponse(
        message="Driver registered successfully",
        driver=DriverOut.model_validate(driver),
        welcome_email_sent=welcome_email_sent,
    )


# ---------------------------
# LIST DRIVERS
# ---------------------------
async def list_drivers(db: AsyncSession, limit: int = 10, page: int = 1, query: str = "") -> DriverListResponse:
    limit = min(max(limit, 1), MAX_PAGE_SIZE)
    page = max(page, 1)
    offset = (page - 1) * limit
    condition = Driver.name.ilike(f"%{query or ''}%")

    try:
        total = (await fetch(db, select(func.count(Driver.id)).where(condition))).scalar_one()
        result = await fetch(
            db,
            select(Driver)
            .where(condition)
            .order_by(Driver.created_at.desc(), Driver.id.desc())
            .limit(limit)
            .offset(offset),
        )
        drivers = result.scalars().all()
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error fetching drivers")
        raise InternalError("Error fetching drivers", details=str(e))

    return DriverListResponse(
        drivers=[DriverOut.model_validate(d) for d in drivers],
        totalCount=total,
        currentPage=page,
        totalPages=math.ceil(total / limit),
    )
