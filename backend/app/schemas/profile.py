from pydantic import BaseModel, Field, field_serializer, model_validator
from typing import Optional, Literal
from datetime import datetime
from uuid import UUID

from app.models.address import AddressType


class AddressUpdate(BaseModel):
    """Address form; fields outside the chosen type are discarded"""
    type: AddressType
    hostel_name: Optional[str] = None
    room_number: Optional[str] = None
    department_name: Optional[str] = None
    cabin_number: Optional[str] = None
    building_name: Optional[str] = None
    floor_number: Optional[str] = None
    landmark: Optional[str] = None
    notes: Optional[str] = None


class AddressResponse(BaseModel):
    id: UUID
    type: AddressType
    hostel_name: Optional[str] = None
    room_number: Optional[str] = None
    department_name: Optional[str] = None
    cabin_number: Optional[str] = None
    building_name: Optional[str] = None
    floor_number: Optional[str] = None
    landmark: Optional[str] = None
    notes: Optional[str] = None
    updated_at: Optional[datetime] = None

    @field_serializer('id')
    def serialize_id(self, value: UUID) -> str:
        return str(value)

    class Config:
        from_attributes = True


class ProfileSetupRequest(BaseModel):
    """
    First-run profile form. The role picks which fields are required:

    - STUDENT: branch, semester, class_number
    - FACULTY: department, office_number
    - OTHERS: nothing extra
    """
    role: Literal["STUDENT", "FACULTY", "OTHERS"]
    full_name: str = Field(..., min_length=2)
    phone_number: str = Field(..., min_length=10, max_length=20)
    block: str = Field(..., min_length=1)
    room_location: str = Field(..., min_length=1)

    # Student
    branch: Optional[str] = None
    semester: Optional[str] = None
    class_number: Optional[str] = None

    # Faculty
    department: Optional[str] = None
    office_number: Optional[str] = None

    @model_validator(mode='after')
    def validate_role_fields(self):
        """Validate required fields for the chosen role"""
        required = {
            "STUDENT": ("branch", "semester", "class_number"),
            "FACULTY": ("department", "office_number"),
            "OTHERS": (),
        }[self.role]

        missing_fields = [
            name for name in required
            if not getattr(self, name) or not getattr(self, name).strip()
        ]
        if missing_fields:
            raise ValueError(
                f"Required fields for {self.role.lower()}: {', '.join(missing_fields)}"
            )
        return self


class ProfileSetupResponse(BaseModel):
    message: str
    address: AddressResponse
