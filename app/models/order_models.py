from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.db import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String, nullable=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    status = Column(String, nullable=False, default="not Delivered")
    storekeeperaccept = Column(String, nullable=False, default="pending")
    supervisoraccept = Column(String, nullable=False, default="pending")
    manageraccept = Column(String, nullable=False, default="pending")
    actual_delivery_date = Column(DateTime(timezone=True), nullable=True)
    total_price = Column(Numeric(14, 2), default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    client = relationship("Client", back_populates="orders")
    locations = relationship("OrderLocation", back_populates="order", cascade="all, delete-orphan")


class OrderLocation(Base):
    __tablename__ = "order_locations"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=True)
    url = Column(String, nullable=True)

    order = relationship("Order", back_populates="locations")
