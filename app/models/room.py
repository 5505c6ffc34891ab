from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, TimestampMixin


class Room(Base, TimestampMixin):
    __tablename__ = "locations"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)  # catalog id, e.g. classroom-1-3
    name: Mapped[str] = mapped_column(String(255), unique=True)
    building_type: Mapped[str] = mapped_column(
        Enum("warehouse", "classroom", "office", name="building_type")
    )

    equipment: Mapped[list["Equipment"]] = relationship(back_populates="room")  # noqa: F821
