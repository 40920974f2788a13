import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from models import *
from services.reservation_service import ReservationService

logger = logging.getLogger(__name__)

table_reservation_router = APIRouter(
    tags=["TableReservation"],
    dependencies=[Depends(get_current_user)],
)


@table_reservation_router.get("/table-reservations", response_model=list[TableReservation], tags=["TableReservation"])
def get_table_reservations(
    page: int = Query(1),
    page_size: int = Query(10),
    filter: Optional[str] = Query(None),
    sort_by: Optional[ReservationSortField] = Query(None),
    order: SortOrder = Query(SortOrder.ASC),
    db: Session = Depends(get_db),
):
    """
    Lists reservations page by page.

    Args:
        filter (str): An ISO date (e.g. 2026-05-01) restricts to reservations
            starting that day, anything else is matched against the status.
    """
    try:
        return ReservationService(db).get_all(page, page_size, filter, sort_by, order)
    except SQLAlchemyError as e:
        logger.exception("Listing reservations failed")
        raise HTTPException(status_code=500, detail=str(e))


# muss vor /table-reservations/{id} stehen
@table_reservation_router.get("/table-reservations/available", response_model=list[Table], tags=["TableReservation"])
def get_available_tables(
    party_size: int = Query(...),
    start: datetime = Query(...),
    duration_minutes: int = Query(..., le=MAX_DURATION_MINUTES),
    db: Session = Depends(get_db),
):
    """
    Finds the tables that can seat a party for the requested slot.

    Returns:
        list: Matching tables, smallest capacity first.
    """
    try:
        return ReservationService(db).find_available_tables(party_size, start, timedelta(minutes=duration_minutes))
    except SQLAlchemyError as e:
        logger.exception("Availability query failed")
        raise HTTPException(status_code=500, detail=str(e))


@table_reservation_router.get("/table-reservations/{id}", response_model=TableReservationDetail, tags=["TableReservation"])
def get_table_reservation(id: int, db: Session = Depends(get_db)):
    try:
        return ReservationService(db).get(id)
    except SQLAlchemyError as e:
        logger.exception("Loading reservation %s failed", id)
        raise HTTPException(status_code=500, detail=str(e))


@table_reservation_router.post("/table-reservations", tags=["TableReservation"])
def create_table_reservation(reservation: TableReservationCreate, db: Session = Depends(get_db)):
    try:
        db_res = ReservationService(db).create(
            table_id=reservation.table_id,
            client_id=reservation.client_id,
            start=reservation.start,
            duration=reservation.duration,
            party_size=reservation.party_size,
            notes=reservation.notes,
            special_menu=reservation.special_menu,
        )
        return {"success": True, "reservation": TableReservation.model_validate(db_res)}
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Creating reservation failed")
        raise HTTPException(status_code=500, detail=str(e))


@table_reservation_router.put("/table-reservations/{id}", tags=["TableReservation"])
def update_table_reservation(id: int, updated_reservation: TableReservationUpdate, db: Session = Depends(get_db)):
    try:
        db_res = ReservationService(db).update(id, updated_reservation)
        return {"success": True, "reservation": TableReservation.model_validate(db_res)}
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Updating reservation %s failed", id)
        raise HTTPException(status_code=500, detail=str(e))


@table_reservation_router.patch("/table-reservations/{id}", tags=["TableReservation"])
def patch_table_reservation(id: int, changes: TableReservationPatch, db: Session = Depends(get_db)):
    try:
        db_res = ReservationService(db).patch(id, changes)
        return {"success": True, "reservation": TableReservation.model_validate(db_res)}
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Patching reservation %s failed", id)
        raise HTTPException(status_code=500, detail=str(e))


@table_reservation_router.post("/table-reservations/{id}/cancel", tags=["TableReservation"])
def cancel_table_reservation(id: int, db: Session = Depends(get_db)):
    try:
        db_res = ReservationService(db).cancel(id)
        return {"success": True, "reservation": TableReservation.model_validate(db_res)}
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Cancelling reservation %s failed", id)
        raise HTTPException(status_code=500, detail=str(e))


@table_reservation_router.delete("/table-reservations/{id}", tags=["TableReservation"])
def delete_table_reservation(id: int, db: Session = Depends(get_db)):
    try:
        ReservationService(db).delete(id)
        return {"success": True}
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Deleting reservation %s failed", id)
        raise HTTPException(status_code=500, detail=str(e))
