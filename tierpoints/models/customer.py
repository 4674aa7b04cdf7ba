from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, String

from tierpoints.core.database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)

    tier = Column(String(20), default="BRONZE", nullable=False)
    points = Column(Integer, default=0, nullable=False)

    email = Column(String(255), nullable=True)
    preferred_store = Column(String(120), nullable=True)
    notifications = Column(Boolean, default=True, nullable=False)

    join_date = Column(Date, nullable=False)
    last_purchase_date = Column(DateTime(timezone=True), nullable=True)
    # set only when a purchase promotes the tier
    last_status_change = Column(DateTime(timezone=True), nullable=True)
