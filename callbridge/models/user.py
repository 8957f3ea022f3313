from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, DateTime, func, UniqueConstraint
from ..services.db import Base

class User(Base):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("location_id", "phone", name="uq_users_location_phone"),)
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), index=True, nullable=True)
    contact_id: Mapped[str | None] = mapped_column(String(128), nullable=True)  # GHL contact
    location_id: Mapped[str | None] = mapped_column(String(128), index=True, nullable=True)

    created_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[DateTime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "contactId": self.contact_id,
            "locationId": self.location_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
