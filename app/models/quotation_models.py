# app/models/quotation_models.py
from decimal import Decimal

from sqlalchemy import (
    Column, Integer, String, Boolean, ForeignKey,
    DateTime, Numeric, func
)
from sqlalchemy.orm import relationship
from app.core.db import Base

VAT_RATE = Decimal("0.15")  # Uniform 15% VAT on every line

PENDING = "pending"
DEFAULT_STATUS = "not Delivered"
DELIVERED_STATUS = "delivered"


# ==================================================
# QUOTATION MODEL
# ==================================================
class Quotation(Base):
    __tablename__ = "quotations"

    id = Column(Integer, primary_key=True, index=True)
    custom_id = Column(String, nullable=False, index=True)

    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    sales_rep_id = Column(Integer, ForeignKey("salesreps.id"), nullable=True)
    supervisor_id = Column(Integer, ForeignKey("supervisors.id"), nullable=True)

    delivery_date = Column(String, nullable=True)
    delivery_type = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    storekeeper_notes = Column(String, nullable=True)
    status = Column(String, nullable=False, default=DEFAULT_STATUS)

    # Approval chain
    storekeeperaccept = Column(String, nullable=False, default=PENDING)
    supervisoraccept = Column(String, nullable=False, default=PENDING)
    manageraccept = Column(String, nullable=False, default=PENDING)
    exported = Column(Boolean, nullable=False, default=False)

    # Financial fields
    total_price = Column(Numeric(14, 2), default=0)      # sum of price * quantity
    total_vat = Column(Numeric(14, 2), default=0)        # 15% of total_price
    total_subtotal = Column(Numeric(14, 2), default=0)   # total_price + total_vat

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())
    actual_delivery_date = Column(DateTime(timezone=True), nullable=True)

    client = relationship("Client", back_populates="quotations")
    products = relationship(
        "QuotationProduct",
        back_populates="quotation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="QuotationProduct.id",
    )


# ==================================================
# QUOTATION LINE ITEM MODEL
# ==================================================
class QuotationProduct(Base):
    __tablename__ = "quotation_products"

    id = Column(Integer, primary_key=True, index=True)
    quotation_id = Column(
        Integer, ForeignKey("quotations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    section = Column(String, nullable=True)
    type = Column(String, nullable=True)
    description = Column(String, nullable=True)
    quantity = Column(Numeric(14, 3), nullable=False, default=0)
    price = Column(Numeric(14, 2), nullable=False, default=0)
    vat = Column(Numeric(14, 2), nullable=False, default=0)
    subtotal = Column(Numeric(14, 2), nullable=False, default=0)

    quotation = relationship("Quotation", back_populates="products")
