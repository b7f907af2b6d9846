"""Lead schemas for the full-representation update contract."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr

# Server-computed or relationship fields; never resubmitted on PUT.
COMPUTED_FIELDS = frozenset(
    {
        "id",
        "status",
        "source",
        "assigned_to",
        "assigned_user",
        "created_at",
        "updated_at",
        "status_changed_at",
        "created_by",
        "updated_by",
        "deleted_at",
        "is_deleted",
    }
)


class LeadBase(BaseModel):
    first_name: str
    last_name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    status_id: int
    source_id: Optional[int] = None
    assigned_to_user_id: Optional[int] = None
    budget_band: Optional[str] = None
    insurance: Optional[str] = None
    zip: Optional[str] = None
    notes: Optional[str] = None
    score: int = 0
    is_active: bool = True


class LeadCreate(LeadBase):
    """Schema for lead creation requests."""


class LeadUpdate(BaseModel):
    """Full writable representation; every field must be present."""

    first_name: str
    last_name: str
    email: Optional[EmailStr]
    phone: Optional[str]
    status_id: int
    source_id: Optional[int]
    assigned_to_user_id: Optional[int]
    budget_band: Optional[str]
    insurance: Optional[str]
    zip: Optional[str]
    notes: Optional[str]
    score: int
    is_active: bool

    model_config = ConfigDict(extra="forbid")


class LookupRef(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class UserRef(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class LeadRead(LeadBase):
    """Schema for lead responses, relationship objects embedded."""

    id: int
    status: Optional[LookupRef] = None
    source: Optional[LookupRef] = None
    assigned_to: Optional[UserRef] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    status_changed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
