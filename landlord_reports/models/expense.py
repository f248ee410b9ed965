import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from landlord_reports.core.database import Base


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # An expense hangs off a property directly OR off one of its locals
    property_id = Column(String(36), ForeignKey("properties.id"), nullable=True, index=True)
    local_id = Column(String(36), ForeignKey("locals.id"), nullable=True, index=True)
    property = relationship("Property", back_populates="expenses")
    local = relationship("Local", back_populates="expenses")

    amount = Column(Numeric(12, 2), nullable=False)
    vat_amount = Column(Numeric(12, 2), nullable=True, default=0)
    category = Column(String, nullable=True)
    payment_status = Column(String, nullable=False, default="pending")  # paid / pending / overdue

    date = Column(DateTime(timezone=True), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
