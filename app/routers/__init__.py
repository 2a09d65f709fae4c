# app/routers/__init__.py
from fastapi import APIRouter

from .quotations_router import router as quotations_router
from .drivers_router import router as drivers_router
from .orders_router import router as orders_router

router = APIRouter(prefix="/api")

router.include_router(quotations_router)
router.include_router(drivers_router)
router.include_router(orders_router)
