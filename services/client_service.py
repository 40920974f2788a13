import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session

from errors import DuplicateEmailError, InvalidArgumentError, NotFoundError
from models import (
    ClientCreate,
    ClientDB,
    ClientPatch,
    ClientSortField,
    ClientUpdate,
    ReservationStatus,
    SortOrder,
    TableReservationDB,
)
from repository import ClientRepository, TableReservationRepository
from timeutil import utcnow

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    ClientSortField.NAME: ClientDB.name,
    ClientSortField.SURNAME: ClientDB.surname,
    ClientSortField.EMAIL: ClientDB.email,
    ClientSortField.LOYALTY_POINTS: ClientDB.loyalty_points,
    ClientSortField.VISIT_COUNT: ClientDB.visit_count,
    ClientSortField.IS_VIP: ClientDB.is_vip,
}


class ClientService:
    def __init__(self, db: Session):
        self.db = db
        self.clients = ClientRepository(db)
        self.reservations = TableReservationRepository(db)

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        filter: Optional[str] = None,
        sort_by: Optional[ClientSortField] = None,
        order: SortOrder = SortOrder.ASC,
    ) -> list[ClientDB]:
        if page < 1 or page_size < 1:
            raise InvalidArgumentError("Invalid pagination parameters.")

        filters = []
        if filter:
            filters.append(
                or_(
                    ClientDB.email.contains(filter.lower()),
                    ClientDB.name.contains(filter),
                    ClientDB.surname.contains(filter),
                )
            )

        order_by = []
        if sort_by is not None:
            column = _SORT_COLUMNS[sort_by]
            order_by.append(column.desc() if order == SortOrder.DESC else column.asc())
        order_by.append(ClientDB.id.asc())

        return self.clients.get_all(
            filters=filters,
            order_by=order_by,
            include=("reservations",),
            skip=(page - 1) * page_size,
            take=page_size,
        )

    def get(self, client_id: int, include_reservations: bool = False) -> ClientDB:
        include = ("reservations",) if include_reservations else ()
        client = self.clients.get_by_id(client_id, include=include)
        if client is None:
            raise NotFoundError(f"Client with ID {client_id} not found.")
        return client

    def create(self, data: ClientCreate) -> ClientDB:
        if self.clients.exists_by_email(data.email):
            raise DuplicateEmailError("A client with this email already exists.")

        values = data.model_dump()
        values["email"] = values["email"].lower()
        client = self.clients.add(ClientDB(**values))
        logger.info("Client %s registered", client.id)
        return client

    def update(self, client_id: int, data: ClientUpdate) -> ClientDB:
        client = self.get(client_id)
        return self._apply(client, data)

    def patch(self, client_id: int, changes: ClientPatch) -> ClientDB:
        client = self.get(client_id)
        snapshot = {field: getattr(client, field) for field in ClientUpdate.model_fields}
        snapshot.update(changes.model_dump(exclude_unset=True))
        try:
            data = ClientUpdate.model_validate(snapshot)
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid patch: {e.errors(include_url=False)}")
        return self._apply(client, data)

    def delete(self, client_id: int) -> None:
        """Cancels the client's active reservations, then deletes the client."""
        client = self.get(client_id)

        active = self.reservations.get_all(
            filters=[TableReservationDB.client_id == client_id, TableReservationRepository.active_filter()]
        )
        now = utcnow()
        try:
            for reservation in active:
                reservation.status = ReservationStatus.CANCELLED
                reservation.cancelled_at = now
                self.reservations.update(reservation, commit=False)
            self.clients.delete(client, commit=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Client %s deleted, %s reservations cancelled", client_id, len(active))

    def _apply(self, client: ClientDB, data: ClientUpdate) -> ClientDB:
        email = data.email.lower()
        if email != client.email and self.clients.exists_by_email(email):
            raise DuplicateEmailError("A client with this email already exists.")

        values = data.model_dump()
        values["email"] = email
        for field, value in values.items():
            setattr(client, field, value)
        return self.clients.update(client)
