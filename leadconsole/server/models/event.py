"""Lead activity log.

Rows keep whichever discriminators and top-level fields their producer wrote,
so the timeline endpoint returns the same mixed shapes the console has to cope
with in production.
"""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from leadconsole.server.db import Base


class LeadEvent(Base):
    __tablename__ = "lead_events"

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(Integer, ForeignKey("leads.id"), nullable=False)
    ts = Column(String, nullable=False)
    kind = Column(String, nullable=True)
    type = Column(String, nullable=True)
    channel = Column(String, nullable=True)
    actor_user_id = Column(Integer, nullable=True)
    by = Column(Integer, nullable=True)
    from_status_id = Column(Integer, nullable=True)
    to_status_id = Column(Integer, nullable=True)
    payload = Column(JSON, nullable=True)

    lead = relationship("Lead", back_populates="events")

    def to_record(self) -> dict:
        record = {"id": self.id, "lead_id": self.lead_id, "ts": self.ts}
        for key in ("kind", "type", "channel", "actor_user_id", "by"):
            value = getattr(self, key)
            if value is not None:
                record[key] = value
        if self.from_status_id is not None or self.to_status_id is not None:
            record["from"] = self.from_status_id
            record["to"] = self.to_status_id
        if self.payload is not None:
            record["payload"] = self.payload
        return record
