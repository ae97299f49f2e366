"""Leave type schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LeaveTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    default_allocation_days: int = Field(0, ge=0, le=365)
    is_active: bool = True


class LeaveTypeUpdate(BaseModel):
    """Partial update. Omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    default_allocation_days: Optional[int] = Field(None, ge=0, le=365)
    is_active: Optional[bool] = None


class LeaveTypeOut(BaseModel):
    """Full leave type representation."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    default_allocation_days: int
    is_active: bool = True
    created_at: datetime
    updated_at: datetime
