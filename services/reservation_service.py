import logging
from datetime import date, datetime, timedelta
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from errors import (
    AlreadyCancelledError,
    CapacityExceededError,
    ConflictError,
    InvalidArgumentError,
    InvalidDurationError,
    InvalidStartTimeError,
    NotFoundError,
    ReservationClosedError,
    ServiceError,
)
from models import (
    ReservationSortField,
    ReservationStatus,
    SortOrder,
    TableDB,
    TableReservationDB,
    TableReservationPatch,
    TableReservationUpdate,
    TableStatus,
)
from repository import ClientRepository, TableRepository, TableReservationRepository
from timeutil import to_utc_naive, utcnow

logger = logging.getLogger(__name__)

LOYALTY_POINTS_PER_BOOKING = 10
LOYALTY_PENALTY_PER_CANCELLATION = 5

_SORT_COLUMNS = {
    ReservationSortField.START: TableReservationDB.start,
    ReservationSortField.CREATED_AT: TableReservationDB.created_at,
    ReservationSortField.PARTY_SIZE: TableReservationDB.party_size,
    ReservationSortField.STATUS: TableReservationDB.status,
}


class ReservationService:
    """Reservation lifecycle, conflict checks and table availability."""

    def __init__(self, db: Session):
        self.db = db
        self.reservations = TableReservationRepository(db)
        self.tables = TableRepository(db)
        self.clients = ClientRepository(db)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        filter: Optional[str] = None,
        sort_by: Optional[ReservationSortField] = None,
        order: SortOrder = SortOrder.ASC,
    ) -> list[TableReservationDB]:
        if page < 1 or page_size < 1:
            raise InvalidArgumentError("Invalid pagination parameters.")

        filters = []
        if filter:
            day = _parse_day(filter)
            if day is not None:
                day_start = datetime(day.year, day.month, day.day)
                filters.append(TableReservationDB.start >= day_start)
                filters.append(TableReservationDB.start < day_start + timedelta(days=1))
            else:
                matching = [s for s in ReservationStatus if filter.lower() in s.value.lower()]
                filters.append(TableReservationDB.status.in_(matching))

        order_by = []
        if sort_by is not None:
            column = _SORT_COLUMNS[sort_by]
            order_by.append(column.desc() if order == SortOrder.DESC else column.asc())
        order_by.append(TableReservationDB.id.asc())

        return self.reservations.get_all(
            filters=filters,
            order_by=order_by,
            skip=(page - 1) * page_size,
            take=page_size,
        )

    def get(self, reservation_id: int) -> TableReservationDB:
        reservation = self.reservations.get_by_id(reservation_id, include=("table", "client"))
        if reservation is None:
            raise NotFoundError(f"Reservation with ID {reservation_id} not found.")
        return reservation

    def has_conflict(
        self,
        table_id: int,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[int] = None,
    ) -> bool:
        return self.reservations.has_conflict(table_id, to_utc_naive(start), to_utc_naive(end), exclude_reservation_id)

    def find_available_tables(self, party_size: int, start: datetime, duration: timedelta) -> list[TableDB]:
        """Tables that can seat the party for [start, start + duration), smallest first."""
        start = to_utc_naive(start)
        if party_size < 1:
            raise InvalidArgumentError("Party size must be at least 1.")
        if duration <= timedelta(0):
            raise InvalidArgumentError("Duration must be positive.")
        if start < utcnow():
            raise InvalidArgumentError("Start time must be in the future.")

        end = _end_of(start, duration, InvalidArgumentError)
        candidates = self.tables.get_all(
            filters=[TableDB.capacity >= party_size, TableDB.status == TableStatus.AVAILABLE],
            order_by=[TableDB.capacity.asc(), TableDB.id.asc()],
        )
        return [t for t in candidates if not self.reservations.has_conflict(t.id, start, end)]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(
        self,
        table_id: int,
        client_id: int,
        start: datetime,
        duration: timedelta,
        party_size: int,
        notes: Optional[str] = None,
        special_menu: bool = False,
    ) -> TableReservationDB:
        start = to_utc_naive(start)

        table = self.tables.get_by_id(table_id, for_update=True)
        if table is None:
            raise NotFoundError(f"Table with ID {table_id} not found.")

        if party_size > table.capacity:
            logger.warning("Party of %s rejected for table %s (capacity %s)", party_size, table_id, table.capacity)
            raise CapacityExceededError("Reservation exceeds table capacity.")

        client = self.clients.get_by_id(client_id)
        if client is None:
            raise NotFoundError(f"Client with ID {client_id} not found.")

        end = _end_of(start, duration, InvalidDurationError)
        if self.reservations.has_conflict(table_id, start, end):
            logger.warning("Conflict on table %s for %s - %s", table_id, start, end)
            raise ConflictError("Time slot conflicts with an existing reservation.")

        if duration <= timedelta(0):
            raise InvalidDurationError("Duration must be positive.")
        if start < utcnow():
            raise InvalidStartTimeError("Reservation start time must be in the future.")

        reservation = TableReservationDB(
            table_id=table_id,
            client_id=client_id,
            start=start,
            duration=duration,
            end=end,
            status=ReservationStatus.PENDING,
            notes=notes,
            party_size=party_size,
            special_menu=special_menu,
        )
        try:
            self.reservations.add(reservation, commit=False)
            self.clients.adjust_loyalty(client_id, LOYALTY_POINTS_PER_BOOKING, visits=1, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(reservation)

        logger.info("Reservation %s created on table %s for client %s", reservation.id, table_id, client_id)
        return reservation

    def update(self, reservation_id: int, data: TableReservationUpdate) -> TableReservationDB:
        reservation = self.reservations.get_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError(f"Reservation with ID {reservation_id} not found.")
        _ensure_open(reservation)
        return self._apply_update(reservation, data)

    def patch(self, reservation_id: int, changes: TableReservationPatch) -> TableReservationDB:
        reservation = self.reservations.get_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError(f"Reservation with ID {reservation_id} not found.")
        _ensure_open(reservation)

        snapshot = {
            "table_id": reservation.table_id,
            "client_id": reservation.client_id,
            "start": reservation.start,
            "duration_minutes": reservation.duration_minutes,
            "party_size": reservation.party_size,
            "notes": reservation.notes,
            "special_menu": reservation.special_menu,
            "status": reservation.status,
        }
        snapshot.update(changes.model_dump(exclude_unset=True))
        try:
            data = TableReservationUpdate.model_validate(snapshot)
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid patch: {e.errors(include_url=False)}")
        return self._apply_update(reservation, data)

    def cancel(self, reservation_id: int) -> TableReservationDB:
        reservation = self.reservations.get_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError(f"Reservation with ID {reservation_id} not found.")

        if reservation.status == ReservationStatus.CANCELLED:
            raise AlreadyCancelledError("Reservation already cancelled.")

        reservation.status = ReservationStatus.CANCELLED
        reservation.cancelled_at = utcnow()
        try:
            self.reservations.update(reservation, commit=False)
            if reservation.client_id is not None:
                self.clients.adjust_loyalty(reservation.client_id, -LOYALTY_PENALTY_PER_CANCELLATION, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(reservation)

        logger.info("Reservation %s cancelled", reservation.id)
        return reservation

    def delete(self, reservation_id: int) -> None:
        reservation = self.reservations.get_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError(f"Reservation with ID {reservation_id} not found.")

        self.reservations.delete(reservation)
        logger.info("Reservation %s deleted", reservation_id)

    # ------------------------------------------------------------------

    def _apply_update(self, reservation: TableReservationDB, data: TableReservationUpdate) -> TableReservationDB:
        """Applies a full update to an open reservation."""
        if data.status == ReservationStatus.CANCELLED:
            raise InvalidArgumentError("Use the cancel operation to cancel a reservation.")

        start = to_utc_naive(data.start)
        duration = data.duration
        end = _end_of(start, duration, InvalidDurationError)

        if (
            start != reservation.start
            or duration != reservation.duration
            or data.table_id != reservation.table_id
            or data.party_size != reservation.party_size
        ):
            table = self.tables.get_by_id(data.table_id, for_update=True)
            if table is None:
                raise NotFoundError("Invalid table ID.")
            if table.capacity < data.party_size:
                raise CapacityExceededError("Exceeds table capacity.")

            if self.reservations.has_conflict(data.table_id, start, end, reservation.id):
                logger.warning("Update of reservation %s conflicts on table %s", reservation.id, data.table_id)
                raise ConflictError("Updated time slot conflicts.")

            if duration <= timedelta(0):
                raise InvalidDurationError("Duration must be positive.")

        if data.client_id != reservation.client_id and self.clients.get_by_id(data.client_id) is None:
            raise NotFoundError(f"Client with ID {data.client_id} not found.")

        reservation.table_id = data.table_id
        reservation.client_id = data.client_id
        reservation.start = start
        reservation.duration = duration
        reservation.end = end
        reservation.party_size = data.party_size
        reservation.notes = data.notes
        reservation.special_menu = data.special_menu
        if data.status is not None:
            reservation.status = data.status

        self.reservations.update(reservation)
        logger.info("Reservation %s updated", reservation.id)
        return reservation


def _ensure_open(reservation: TableReservationDB) -> None:
    if not reservation.is_active:
        raise ReservationClosedError(f"Reservation is {reservation.status.value} and can no longer be changed.")


def _end_of(start: datetime, duration: timedelta, error: type[ServiceError]) -> datetime:
    try:
        return start + duration
    except OverflowError:
        raise error("Duration is too long.")


def _parse_day(value: str) -> Optional[date]:
    try:
        return datetime.fromisoformat(value.strip()).date()
    except ValueError:
        return None
