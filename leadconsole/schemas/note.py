"""Note schemas for lead notes."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from leadconsole.schemas.lead import UserRef


class NoteBase(BaseModel):
    body: str
    is_pinned: bool = False


class NoteCreate(NoteBase):
    """Schema for creating a note."""

    lead_id: int
    user_id: Optional[int] = None


class NoteRead(NoteBase):
    """Schema for reading a note."""

    id: int
    lead_id: int
    user_id: Optional[int] = None
    user: Optional[UserRef] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NoteEntry(BaseModel):
    """A note as shown in the lead's notes tab."""

    id: Optional[int] = None
    author: str
    body: str
    created_at: Optional[datetime] = None
    is_pinned: bool = False

    model_config = ConfigDict(frozen=True)
