import uuid

from sqlalchemy import Column, String, DateTime, Date, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from landlord_reports.core.database import Base


class Lease(Base):
    __tablename__ = "leases"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    local_id = Column(String(36), ForeignKey("locals.id"), nullable=False, index=True)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=True, index=True)
    local = relationship("Local", back_populates="leases")
    tenant = relationship("Tenant", back_populates="leases")
    payments = relationship("Payment", back_populates="lease")

    status = Column(String, nullable=False, default="active", index=True)  # active / ended / cancelled

    # Lease period
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False, index=True)

    # Monthly rent
    lease_amount = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)
