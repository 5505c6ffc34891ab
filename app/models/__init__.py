from app.models.base import Base
from app.models.equipment import Equipment
from app.models.room import Room
from app.models.transfer import TransferRecord

__all__ = ["Base", "Equipment", "Room", "TransferRecord"]
