from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ReservationStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"

    @classmethod
    def closed(cls) -> tuple["ReservationStatus", ...]:
        """Statuses that no longer count as active bookings."""
        return (cls.CANCELLED, cls.COMPLETED)


class ReservationSortField(str, Enum):
    START = "start"
    CREATED_AT = "created_at"
    PARTY_SIZE = "party_size"
    STATUS = "status"


MAX_DURATION_MINUTES = 7 * 24 * 60


class TableReservationCreate(BaseModel):
    table_id: int
    client_id: int
    start: datetime
    # Positivity is checked by the service, after capacity and conflict checks.
    duration_minutes: int = Field(..., le=MAX_DURATION_MINUTES)
    party_size: int = Field(..., ge=1)
    notes: Optional[str] = Field(None, max_length=500)
    special_menu: bool = False

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.duration_minutes)


class TableReservationUpdate(TableReservationCreate):
    status: Optional[ReservationStatus] = None


class TableReservationPatch(BaseModel):
    table_id: Optional[int] = None
    client_id: Optional[int] = None
    start: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(None, le=MAX_DURATION_MINUTES)
    party_size: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = Field(None, max_length=500)
    special_menu: Optional[bool] = None
    status: Optional[ReservationStatus] = None


class TableReservation(BaseModel):
    id: int
    table_id: Optional[int]
    client_id: Optional[int]
    start: datetime
    end: datetime
    duration_minutes: int
    status: ReservationStatus
    notes: Optional[str] = None
    party_size: int
    special_menu: bool
    created_at: datetime
    cancelled_at: Optional[datetime] = None

    class Config:
        from_attributes = True
