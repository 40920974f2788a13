from .Base import Base
from .Common import SortOrder
from .ErrorCode import ErrorCode
from .TableReservation import (
    MAX_DURATION_MINUTES,
    ReservationSortField,
    ReservationStatus,
    TableReservation,
    TableReservationCreate,
    TableReservationPatch,
    TableReservationUpdate,
)
from .Table import Table, TableCreate, TablePatch, TableSortField, TableStatus, TableUpdate, TableWithReservations
from .Client import Client, ClientCreate, ClientPatch, ClientSortField, ClientUpdate, ClientWithReservations
from .TableReservationDetail import TableReservationDetail
from .User import LoginRequest, RefreshTokenRequest, Token, User, UserCreate
from .TableDB import TableDB
from .ClientDB import ClientDB
from .TableReservationDB import TableReservationDB
from .UserDB import UserDB
from .RefreshTokenDB import RefreshTokenDB
