from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from app.core.db import Base

DRIVER_ROLES = ("driver", "admin", "dispatcher")


class Driver(Base):
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    phone = Column(String, nullable=False)
    clerk_id = Column(String, nullable=True)
    role = Column(String, nullable=False, default="driver")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
