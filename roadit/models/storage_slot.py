# roadit/models/storage_slot.py
from datetime import datetime

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from roadit.db.base import Base

class StorageSlot(Base):
    __tablename__ = "storage_slots"

    # one row per named slot; the value is a whole serialized document
    key: Mapped[str] = mapped_column(String(120), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
