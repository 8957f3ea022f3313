from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, DateTime, func, JSON, Index
from ..services.db import Base

class CallLog(Base):
    __tablename__ = "call_logs"
    __mapper_args__ = {"eager_defaults": True}
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    type: Mapped[str] = mapped_column(String(32), index=True)  # inbound_call|outbound_call
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    contact_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    location_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="processed")
    payload: Mapped[dict | None] = mapped_column(JSON, nullable=True)  # original body, verbatim

    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "phone": self.phone,
            "contactId": self.contact_id,
            "locationId": self.location_id,
            "status": self.status,
            "payload": self.payload,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

Index("ix_call_logs_location_created", CallLog.location_id, CallLog.created_at)
