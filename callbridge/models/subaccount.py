from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, DateTime, func
from ..services.db import Base

class Subaccount(Base):
    __tablename__ = "subaccounts"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # GHL location this tenant is in the CRM
    location_id: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    ghl_inbound_url: Mapped[str] = mapped_column(String(2048))
    # digits only, see services.phone.normalize_phone
    did_number: Mapped[str] = mapped_column(String(32), unique=True, index=True)

    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "locationId": self.location_id,
            "ghlInboundUrl": self.ghl_inbound_url,
            "didNumber": self.did_number,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
