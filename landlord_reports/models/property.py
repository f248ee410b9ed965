import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from landlord_reports.core.database import Base


class Property(Base):
    __tablename__ = "properties"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    name = Column(String, nullable=False)
    location = Column(String, nullable=True)

    # At most one manager owns a property at a time
    manager_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    manager = relationship("User", back_populates="managed_properties")

    # Reverse relationships - ONE property has MANY locals, payments, expenses
    locals = relationship("Local", back_populates="property")
    payments = relationship("Payment", back_populates="property")
    expenses = relationship("Expense", back_populates="property")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
