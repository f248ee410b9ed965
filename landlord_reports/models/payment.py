import uuid

from sqlalchemy import Column, String, DateTime, Date, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from landlord_reports.core.database import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    lease_id = Column(String(36), ForeignKey("leases.id", ondelete="CASCADE"), nullable=False, index=True)
    # Denormalized convenience copy of lease.local.property_id; may be stale or unset
    property_id = Column(String(36), ForeignKey("properties.id"), nullable=True, index=True)

    amount = Column(Numeric(12, 2), nullable=False)

    # Transaction date (income is counted by this)
    date = Column(DateTime(timezone=True), nullable=False, index=True)

    # Coverage period the payment settles (arrears are checked against this)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    lease = relationship("Lease", back_populates="payments")
    property = relationship("Property", back_populates="payments")
