from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from models.TableReservation import TableReservation


class ClientSortField(str, Enum):
    NAME = "name"
    SURNAME = "surname"
    EMAIL = "email"
    LOYALTY_POINTS = "loyalty_points"
    VISIT_COUNT = "visit_count"
    IS_VIP = "is_vip"


class ClientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    surname: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=20)
    email: EmailStr
    birth_date: Optional[date] = None
    preferences: Optional[str] = Field(None, max_length=500)
    is_vip: bool = False
    internal_notes: Optional[str] = None


class ClientUpdate(ClientCreate):
    pass


class ClientPatch(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    surname: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, min_length=1, max_length=20)
    email: Optional[EmailStr] = None
    birth_date: Optional[date] = None
    preferences: Optional[str] = Field(None, max_length=500)
    is_vip: Optional[bool] = None
    internal_notes: Optional[str] = None


class Client(BaseModel):
    id: int
    name: str
    surname: str
    phone: str
    email: EmailStr
    birth_date: Optional[date] = None
    preferences: Optional[str] = None
    loyalty_points: int
    is_vip: bool
    visit_count: int
    internal_notes: Optional[str] = None

    class Config:
        from_attributes = True


class ClientWithReservations(Client):
    reservations: list[TableReservation] = []
