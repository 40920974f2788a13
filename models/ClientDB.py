from sqlalchemy import Boolean, Column, Date, Integer, String, Text
from sqlalchemy.orm import relationship
from models.Base import Base

class ClientDB(Base):
    __tablename__ = "client"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    surname = Column(String(100), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(256), unique=True, nullable=False, index=True)
    birth_date = Column(Date, nullable=True)
    preferences = Column(String(500), nullable=True)
    loyalty_points = Column(Integer, nullable=False, default=0)
    is_vip = Column(Boolean, nullable=False, default=False)
    visit_count = Column(Integer, nullable=False, default=0)
    internal_notes = Column(Text, nullable=True)

    reservations = relationship(
        "TableReservationDB",
        back_populates="client",
        order_by="TableReservationDB.start",
    )

    def __repr__(self) -> str:
        return f"<ClientDB(id={self.id}, email={self.email!r}, points={self.loyalty_points})>"
