"""
Delivery address - one per user, snapshotted onto every order
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, Enum as SQLEnum, Text
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class AddressType(str, enum.Enum):
    """Where on campus the prints are delivered"""
    HOSTEL = "Hostel"
    DEPARTMENT = "Department"
    CUSTOM = "Custom"


# Columns that belong to each address type; the rest are stored as NULL
TYPE_FIELDS = {
    AddressType.HOSTEL: ("hostel_name", "room_number"),
    AddressType.DEPARTMENT: ("department_name", "cabin_number"),
    AddressType.CUSTOM: ("building_name", "floor_number"),
}


class Address(Base):
    """Campus delivery address"""
    __tablename__ = "addresses"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)

    type = Column(SQLEnum(AddressType), nullable=False)

    # Hostel
    hostel_name = Column(String(255), nullable=True)
    room_number = Column(String(50), nullable=True)

    # Department
    department_name = Column(String(255), nullable=True)
    cabin_number = Column(String(50), nullable=True)

    # Custom
    building_name = Column(String(255), nullable=True)
    floor_number = Column(String(50), nullable=True)

    landmark = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="address")

    def to_snapshot(self) -> dict:
        """Plain dict copied onto an order at placement time"""
        return {
            "type": self.type.value if self.type else None,
            "hostel_name": self.hostel_name,
            "room_number": self.room_number,
            "department_name": self.department_name,
            "cabin_number": self.cabin_number,
            "building_name": self.building_name,
            "floor_number": self.floor_number,
            "landmark": self.landmark,
            "notes": self.notes,
        }

    def __repr__(self):
        return f"<Address {self.type} user={self.user_id}>"
