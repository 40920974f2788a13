from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship
from models.Base import Base
from models.Table import TableStatus

class TableDB(Base):
    __tablename__ = "table"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    number = Column(String(50), unique=True, nullable=False, index=True)
    capacity = Column(Integer, nullable=False)
    location = Column(String(100), nullable=False, default="Interior")
    is_accessible = Column(Boolean, nullable=False, default=False)
    has_view = Column(Boolean, nullable=False, default=False)
    status = Column(
        Enum(TableStatus, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        nullable=False,
        default=TableStatus.AVAILABLE,
    )
    last_cleaned_at = Column(DateTime, nullable=True)
    average_rating = Column(Integer, nullable=False, default=0)

    # Reservations outlive the table; the ORM clears table_id on delete.
    reservations = relationship(
        "TableReservationDB",
        back_populates="table",
        order_by="TableReservationDB.start",
    )

    __table_args__ = (
        CheckConstraint("capacity >= 1 AND capacity <= 20", name="check_table_capacity_range"),
    )

    def __repr__(self) -> str:
        return f"<TableDB(id={self.id}, number={self.number!r}, capacity={self.capacity}, status={self.status})>"
