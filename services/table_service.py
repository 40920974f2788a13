import logging
from typing import Optional

from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session

from errors import DuplicateTableNumberError, HasActiveReservationsError, InvalidArgumentError, NotFoundError
from models import SortOrder, TableCreate, TableDB, TablePatch, TableReservationDB, TableSortField, TableStatus, TableUpdate
from repository import TableRepository, TableReservationRepository

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    TableSortField.NUMBER: TableDB.number,
    TableSortField.CAPACITY: TableDB.capacity,
    TableSortField.LOCATION: TableDB.location,
    TableSortField.STATUS: TableDB.status,
    TableSortField.AVERAGE_RATING: TableDB.average_rating,
}


class TableService:
    def __init__(self, db: Session):
        self.db = db
        self.tables = TableRepository(db)
        self.reservations = TableReservationRepository(db)

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        filter: Optional[str] = None,
        sort_by: Optional[TableSortField] = None,
        order: SortOrder = SortOrder.ASC,
    ) -> list[TableDB]:
        if page < 1 or page_size < 1:
            raise InvalidArgumentError("Invalid pagination parameters.")

        filters = []
        if filter:
            statuses = [s for s in TableStatus if filter.lower() in s.value.lower()]
            filters.append(or_(TableDB.status.in_(statuses), TableDB.location.contains(filter)))

        order_by = []
        if sort_by is not None:
            column = _SORT_COLUMNS[sort_by]
            order_by.append(column.desc() if order == SortOrder.DESC else column.asc())
        order_by.append(TableDB.id.asc())

        return self.tables.get_all(
            filters=filters,
            order_by=order_by,
            include=("reservations",),
            skip=(page - 1) * page_size,
            take=page_size,
        )

    def get_all_with_reservations(self) -> list[TableDB]:
        return self.tables.get_all(order_by=[TableDB.id.asc()], include=("reservations",))

    def get(self, table_id: int, include_reservations: bool = False) -> TableDB:
        include = ("reservations",) if include_reservations else ()
        table = self.tables.get_by_id(table_id, include=include)
        if table is None:
            raise NotFoundError(f"Table with ID {table_id} not found.")
        return table

    def create(self, data: TableCreate) -> TableDB:
        if self.tables.exists_by_number(data.number):
            raise DuplicateTableNumberError("A table with this number already exists.")

        table = self.tables.add(TableDB(**data.model_dump()))
        logger.info("Table %s (%s) created", table.id, table.number)
        return table

    def update(self, table_id: int, data: TableUpdate) -> TableDB:
        table = self.get(table_id)
        return self._apply(table, data)

    def patch(self, table_id: int, changes: TablePatch) -> TableDB:
        table = self.get(table_id)
        snapshot = {field: getattr(table, field) for field in TableUpdate.model_fields}
        snapshot.update(changes.model_dump(exclude_unset=True))
        try:
            data = TableUpdate.model_validate(snapshot)
        except ValidationError as e:
            raise InvalidArgumentError(f"Invalid patch: {e.errors(include_url=False)}")
        return self._apply(table, data)

    def delete(self, table_id: int) -> None:
        table = self.get(table_id)

        active = self.reservations.count(
            filters=[TableReservationDB.table_id == table_id, TableReservationRepository.active_filter()]
        )
        if active > 0:
            logger.warning("Refusing to delete table %s with %s active reservations", table_id, active)
            raise HasActiveReservationsError("Cannot delete table with active reservations.")

        self.tables.delete(table)
        logger.info("Table %s deleted", table_id)

    def _apply(self, table: TableDB, data: TableUpdate) -> TableDB:
        if data.number != table.number and self.tables.exists_by_number(data.number):
            raise DuplicateTableNumberError("A table with this number already exists.")

        for field, value in data.model_dump().items():
            setattr(table, field, value)
        return self.tables.update(table)
