from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class TransferRecord(Base):
    """Append-only audit row, one per equipment move.

    ``equipment_id`` is not a foreign key; rows survive the purge of their
    equipment.
    """

    __tablename__ = "equipment_transfer_history"

    id: Mapped[int] = mapped_column(primary_key=True)
    equipment_id: Mapped[str] = mapped_column(String(36), index=True)
    from_room_id: Mapped[str] = mapped_column(String(50))
    to_room_id: Mapped[str] = mapped_column(String(50))
    previous_status: Mapped[str] = mapped_column(String(20))
    new_status: Mapped[str] = mapped_column(String(20))
    transferred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
