import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from landlord_reports.core.database import Base


class Local(Base):
    """A rentable unit (shop, office, apartment) inside a property."""
    __tablename__ = "locals"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Foreign key to Property
    property_id = Column(String(36), ForeignKey("properties.id"), nullable=False, index=True)
    property = relationship("Property", back_populates="locals")
    leases = relationship("Lease", back_populates="local")
    expenses = relationship("Expense", back_populates="local")

    reference_code = Column(String, nullable=False)
    status = Column(String, nullable=False, default="available", index=True)  # available / occupied / maintenance
    size_m2 = Column(Numeric(10, 2), nullable=True)
    rent_price = Column(Numeric(12, 2), nullable=True)

    # Timestamps (updated_at doubles as "vacant since" in the vacancy report)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), server_default=func.now(), nullable=False)
