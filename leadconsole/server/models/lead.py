"""Lead model for the server of record."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from leadconsole.core.time import utc_now
from leadconsole.server.db import Base


class Lead(Base):
    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    status_id = Column(Integer, ForeignKey("lead_statuses.id"), nullable=False)
    source_id = Column(Integer, ForeignKey("lead_sources.id"), nullable=True)
    assigned_to_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    budget_band = Column(String, nullable=True)
    insurance = Column(String, nullable=True)
    zip = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    score = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    status_changed_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utc_now)

    status = relationship("LeadStatus")
    source = relationship("LeadSource")
    assigned_to = relationship("User")
    events = relationship("LeadEvent", back_populates="lead", cascade="all, delete-orphan")
    lead_notes = relationship("LeadNote", back_populates="lead", cascade="all, delete-orphan")
