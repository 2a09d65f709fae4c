from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.db import Base


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    client_name = Column(String, nullable=False)
    company_name = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    tax_number = Column(String, nullable=True)
    branch_number = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    street = Column(String, nullable=True)
    city = Column(String, nullable=True)
    region = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    quotations = relationship("Quotation", back_populates="client")
    orders = relationship("Order", back_populates="client")
