import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth import get_current_user, require_admin
from database import get_db
from models import *
from services.client_service import ClientService

logger = logging.getLogger(__name__)

client_router = APIRouter(
    tags=["Client"],
    dependencies=[Depends(get_current_user)],
)


@client_router.get("/clients", response_model=list[ClientWithReservations], tags=["Client"])
def get_clients(
    page: int = Query(1),
    page_size: int = Query(10),
    filter: Optional[str] = Query(None),
    sort_by: Optional[ClientSortField] = Query(None),
    order: SortOrder = Query(SortOrder.ASC),
    db: Session = Depends(get_db),
):
    """
    Lists clients page by page.

    Args:
        filter (str): Substring matched against email, name and surname.
        sort_by (ClientSortField): Column to sort by, ties broken by id.
    """
    try:
        return ClientService(db).get_all(page, page_size, filter, sort_by, order)
    except SQLAlchemyError as e:
        logger.exception("Listing clients failed")
        raise HTTPException(status_code=500, detail=str(e))


@client_router.get("/clients/{id}", response_model=ClientWithReservations, tags=["Client"])
def get_client(id: int, db: Session = Depends(get_db)):
    try:
        return ClientService(db).get(id, include_reservations=True)
    except SQLAlchemyError as e:
        logger.exception("Loading client %s failed", id)
        raise HTTPException(status_code=500, detail=str(e))


@client_router.post("/clients", tags=["Client"])
def create_client(client: ClientCreate, db: Session = Depends(get_db)):
    try:
        db_client = ClientService(db).create(client)
        return {"success": True, "client": Client.model_validate(db_client)}
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Creating client failed")
        raise HTTPException(status_code=500, detail=str(e))


@client_router.put("/clients/{id}", tags=["Client"])
def update_client(id: int, updated_client: ClientUpdate, db: Session = Depends(get_db)):
    try:
        db_client = ClientService(db).update(id, updated_client)
        return {"success": True, "client": Client.model_validate(db_client)}
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Updating client %s failed", id)
        raise HTTPException(status_code=500, detail=str(e))


@client_router.patch("/clients/{id}", tags=["Client"])
def patch_client(id: int, changes: ClientPatch, db: Session = Depends(get_db)):
    try:
        db_client = ClientService(db).patch(id, changes)
        return {"success": True, "client": Client.model_validate(db_client)}
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Patching client %s failed", id)
        raise HTTPException(status_code=500, detail=str(e))


@client_router.delete("/clients/{id}", tags=["Client"], dependencies=[Depends(require_admin)])
def delete_client(id: int, db: Session = Depends(get_db)):
    """
    Deletes a client.

    Pending and confirmed reservations of the client are cancelled first; the
    reservation history itself is kept without the client reference.
    """
    try:
        ClientService(db).delete(id)
        return {"success": True}
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Deleting client %s failed", id)
        raise HTTPException(status_code=500, detail=str(e))
