"""SQLAlchemy-backed entity store.

One generic repository with filtered, sorted and paginated retrieval, plus thin
subclasses for the entity-specific lookups. ``add``, ``update`` and ``delete``
commit by default; pass ``commit=False`` to join several writes into one
transaction and commit from the caller.
"""

from datetime import datetime
from typing import Any, Generic, Iterable, Optional, TypeVar

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from models import ClientDB, RefreshTokenDB, ReservationStatus, TableDB, TableReservationDB, UserDB

T = TypeVar("T")


class BaseRepository(Generic[T]):
    model: type[T]

    def __init__(self, db: Session):
        self.db = db

    def _query(self, include: Iterable[str] = ()):
        query = self.db.query(self.model)
        for name in include:
            query = query.options(selectinload(getattr(self.model, name)))
        return query

    def get_all(
        self,
        filters: Iterable[Any] = (),
        order_by: Iterable[Any] = (),
        include: Iterable[str] = (),
        skip: Optional[int] = None,
        take: Optional[int] = None,
    ) -> list[T]:
        query = self._query(include).filter(*filters).order_by(*order_by)
        if skip is not None:
            query = query.offset(skip)
        if take is not None:
            query = query.limit(take)
        return query.all()

    def get_by_id(self, id: int, include: Iterable[str] = (), for_update: bool = False) -> Optional[T]:
        query = self._query(include).filter(self.model.id == id)
        if for_update:
            # no-op on SQLite, row lock elsewhere
            query = query.with_for_update()
        return query.first()

    def add(self, entity: T, commit: bool = True) -> T:
        self.db.add(entity)
        self._flush_or_commit(entity, commit)
        return entity

    def update(self, entity: T, commit: bool = True) -> T:
        self.db.add(entity)
        self._flush_or_commit(entity, commit)
        return entity

    def delete(self, entity: T, commit: bool = True) -> None:
        self.db.delete(entity)
        if commit:
            self.db.commit()
        else:
            self.db.flush()

    def count(self, filters: Iterable[Any] = ()) -> int:
        return self.db.query(func.count(self.model.id)).filter(*filters).scalar()

    def _flush_or_commit(self, entity: T, commit: bool) -> None:
        if commit:
            self.db.commit()
            self.db.refresh(entity)
        else:
            self.db.flush()


class TableRepository(BaseRepository[TableDB]):
    model = TableDB

    def exists_by_number(self, number: str) -> bool:
        return self.db.query(self._query().filter(TableDB.number == number).exists()).scalar()


class ClientRepository(BaseRepository[ClientDB]):
    model = ClientDB

    def exists_by_email(self, email: str) -> bool:
        return self.db.query(self._query().filter(ClientDB.email == email.lower()).exists()).scalar()

    def adjust_loyalty(self, client_id: int, points: int, visits: int = 0, commit: bool = True) -> bool:
        """Applies a point/visit delta as one UPDATE statement.

        Returns False when the client no longer exists.
        """
        updated = (
            self.db.query(ClientDB)
            .filter(ClientDB.id == client_id)
            .update(
                {
                    ClientDB.loyalty_points: ClientDB.loyalty_points + points,
                    ClientDB.visit_count: ClientDB.visit_count + visits,
                },
                synchronize_session="fetch",
            )
        )
        if commit:
            self.db.commit()
        return updated > 0


class TableReservationRepository(BaseRepository[TableReservationDB]):
    model = TableReservationDB

    def has_conflict(
        self,
        table_id: int,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[int] = None,
    ) -> bool:
        """True if a non-cancelled reservation on the table overlaps [start, end).

        Intervals that only touch at an endpoint do not overlap.
        """
        query = self._query().filter(
            TableReservationDB.table_id == table_id,
            TableReservationDB.status != ReservationStatus.CANCELLED,
            TableReservationDB.start < end,
            TableReservationDB.end > start,
        )
        if exclude_reservation_id is not None:
            query = query.filter(TableReservationDB.id != exclude_reservation_id)
        return self.db.query(query.exists()).scalar()

    @staticmethod
    def active_filter():
        return TableReservationDB.status.notin_(ReservationStatus.closed())


class UserRepository(BaseRepository[UserDB]):
    model = UserDB

    def get_by_username(self, username: str) -> Optional[UserDB]:
        return self._query().filter(UserDB.username == username).first()

    def exists_by_username(self, username: str) -> bool:
        return self.db.query(self._query().filter(UserDB.username == username).exists()).scalar()

    def exists_by_email(self, email: str) -> bool:
        return self.db.query(self._query().filter(UserDB.email == email.lower()).exists()).scalar()


class RefreshTokenRepository(BaseRepository[RefreshTokenDB]):
    model = RefreshTokenDB

    def get_by_token(self, token: str) -> Optional[RefreshTokenDB]:
        return self._query().filter(RefreshTokenDB.token == token).first()
