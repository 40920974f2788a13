from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from models.TableReservation import TableReservation


class TableStatus(str, Enum):
    AVAILABLE = "Available"
    OCCUPIED = "Occupied"
    MAINTENANCE = "Maintenance"


class TableSortField(str, Enum):
    NUMBER = "number"
    CAPACITY = "capacity"
    LOCATION = "location"
    STATUS = "status"
    AVERAGE_RATING = "average_rating"


class TableCreate(BaseModel):
    number: str = Field(..., min_length=1, max_length=50)
    capacity: int = Field(..., ge=1, le=20)
    location: str = Field("Interior", max_length=100)
    is_accessible: bool = False
    has_view: bool = False
    status: TableStatus = TableStatus.AVAILABLE


class TableUpdate(TableCreate):
    last_cleaned_at: Optional[datetime] = None
    average_rating: int = Field(0, ge=0, le=5)


class TablePatch(BaseModel):
    number: Optional[str] = Field(None, min_length=1, max_length=50)
    capacity: Optional[int] = Field(None, ge=1, le=20)
    location: Optional[str] = Field(None, max_length=100)
    is_accessible: Optional[bool] = None
    has_view: Optional[bool] = None
    status: Optional[TableStatus] = None
    last_cleaned_at: Optional[datetime] = None
    average_rating: Optional[int] = Field(None, ge=0, le=5)


class Table(BaseModel):
    id: int
    number: str
    capacity: int
    location: str
    is_accessible: bool
    has_view: bool
    status: TableStatus
    last_cleaned_at: Optional[datetime] = None
    average_rating: int

    class Config:
        from_attributes = True


class TableWithReservations(Table):
    reservations: list[TableReservation] = []
