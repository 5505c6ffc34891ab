from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base


class Equipment(Base):
    __tablename__ = "equipment"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)  # uuid4
    model: Mapped[str] = mapped_column(String(255))
    equipment_type: Mapped[str] = mapped_column(String(50))
    serial_number: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    date_imported: Mapped[str] = mapped_column(String(10))  # MM/YYYY
    status: Mapped[str] = mapped_column(
        Enum(
            "stored", "maintenance", "replaced", "in-use", "need-replacement",
            name="equipment_status",
        ),
        default="stored",
    )
    room_id: Mapped[str] = mapped_column(ForeignKey("locations.id"), index=True)
    date_added: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    delete_reason: Mapped[str | None] = mapped_column(
        Enum("broken", "obsolete", "other", name="delete_reason")
    )
    delete_note: Mapped[str | None] = mapped_column(Text)

    room: Mapped["Room"] = relationship(back_populates="equipment")  # noqa: F821

    @property
    def is_deleted(self) -> bool:
        return self.delete_reason is not None
