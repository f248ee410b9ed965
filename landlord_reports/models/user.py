import uuid

from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from landlord_reports.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    username = Column(String, nullable=True)
    email = Column(String, nullable=True, unique=True, index=True)
    role = Column(String, nullable=False, default="manager")  # admin / manager
    is_active = Column(Boolean, nullable=False, default=True)

    # ONE manager owns MANY properties
    managed_properties = relationship("Property", back_populates="manager")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
