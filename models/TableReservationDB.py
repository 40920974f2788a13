from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, Interval, String
from sqlalchemy.orm import relationship
from models.Base import Base
from models.TableReservation import ReservationStatus
from timeutil import utcnow

class TableReservationDB(Base):
    __tablename__ = "table_reservation"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    table_id = Column(Integer, ForeignKey("table.id", ondelete="SET NULL"), nullable=True, index=True)
    client_id = Column(Integer, ForeignKey("client.id", ondelete="SET NULL"), nullable=True, index=True)
    start = Column(DateTime, nullable=False, index=True)
    duration = Column(Interval, nullable=False)
    # always start + duration, kept so overlap checks run in the database
    end = Column(DateTime, nullable=False)
    status = Column(
        Enum(ReservationStatus, values_callable=lambda e: [m.value for m in e], native_enum=False, length=20),
        nullable=False,
        default=ReservationStatus.PENDING,
    )
    notes = Column(String(500), nullable=True)
    party_size = Column(Integer, nullable=False)
    special_menu = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    cancelled_at = Column(DateTime, nullable=True)

    table = relationship("TableDB", back_populates="reservations")
    client = relationship("ClientDB", back_populates="reservations")

    __table_args__ = (
        CheckConstraint("party_size > 0", name="check_reservation_party_size_positive"),
    )

    @property
    def duration_minutes(self) -> int:
        return int(self.duration.total_seconds() // 60)

    @property
    def is_active(self) -> bool:
        return self.status not in ReservationStatus.closed()

    def __repr__(self) -> str:
        return (
            f"<TableReservationDB(id={self.id}, table={self.table_id}, client={self.client_id}, "
            f"start={self.start}, end={self.end}, status={self.status})>"
        )
