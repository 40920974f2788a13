import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth import get_current_user, require_admin
from database import get_db
from models import *
from services.table_service import TableService

logger = logging.getLogger(__name__)

table_router = APIRouter(
    tags=["Table"],
    dependencies=[Depends(get_current_user)],
)


@table_router.get("/tables-with-reservations", response_model=list[TableWithReservations], tags=["Table"])
def get_tables_with_reservations(db: Session = Depends(get_db)):
    """
    Retrieves all tables with their reservations.

    Returns:
        list: A list of tables, each containing an array of reservations ordered by start.
    """
    try:
        return TableService(db).get_all_with_reservations()
    except SQLAlchemyError as e:
        logger.exception("Loading tables with reservations failed")
        raise HTTPException(status_code=500, detail=str(e))


@table_router.get("/tables", response_model=list[TableWithReservations], tags=["Table"])
def get_tables(
    page: int = Query(1),
    page_size: int = Query(10),
    filter: Optional[str] = Query(None),
    sort_by: Optional[TableSortField] = Query(None),
    order: SortOrder = Query(SortOrder.ASC),
    db: Session = Depends(get_db),
):
    try:
        return TableService(db).get_all(page, page_size, filter, sort_by, order)
    except SQLAlchemyError as e:
        logger.exception("Listing tables failed")
        raise HTTPException(status_code=500, detail=str(e))


@table_router.get("/tables/{id}", response_model=TableWithReservations, tags=["Table"])
def get_table(id: int, db: Session = Depends(get_db)):
    try:
        return TableService(db).get(id, include_reservations=True)
    except SQLAlchemyError as e:
        logger.exception("Loading table %s failed", id)
        raise HTTPException(status_code=500, detail=str(e))


@table_router.post("/tables", tags=["Table"], dependencies=[Depends(require_admin)])
def create_table(table: TableCreate, db: Session = Depends(get_db)):
    try:
        db_table = TableService(db).create(table)
        return {"success": True, "table": Table.model_validate(db_table)}
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Creating table failed")
        raise HTTPException(status_code=500, detail=str(e))


@table_router.put("/tables/{id}", tags=["Table"], dependencies=[Depends(require_admin)])
def update_table(id: int, updated_table: TableUpdate, db: Session = Depends(get_db)):
    try:
        db_table = TableService(db).update(id, updated_table)
        return {"success": True, "table": Table.model_validate(db_table)}
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Updating table %s failed", id)
        raise HTTPException(status_code=500, detail=str(e))


@table_router.patch("/tables/{id}", tags=["Table"], dependencies=[Depends(require_admin)])
def patch_table(id: int, changes: TablePatch, db: Session = Depends(get_db)):
    try:
        db_table = TableService(db).patch(id, changes)
        return {"success": True, "table": Table.model_validate(db_table)}
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Patching table %s failed", id)
        raise HTTPException(status_code=500, detail=str(e))


@table_router.delete("/tables/{id}", tags=["Table"], dependencies=[Depends(require_admin)])
def delete_table(id: int, db: Session = Depends(get_db)):
    try:
        TableService(db).delete(id)
        return {"success": True}
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Deleting table %s failed", id)
        raise HTTPException(status_code=500, detail=str(e))
