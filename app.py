import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import SessionLocal
from errors import ServiceError
from routes.auth_route import auth_router
from routes.client_route import client_router
from routes.table_reservation_route import table_reservation_router
from routes.table_route import table_router
from services.auth_service import AuthService

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def bootstrap_admin() -> None:
    if not (settings.admin_username and settings.admin_password and settings.admin_email):
        return
    db = SessionLocal()
    try:
        AuthService(db).ensure_admin(settings.admin_username, settings.admin_password, settings.admin_email)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    bootstrap_admin()
    yield


app = FastAPI(title="Restaurant Reservations", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.code.value)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(auth_router)
app.include_router(table_router)
app.include_router(client_router)
app.include_router(table_reservation_router)


@app.get("/")
async def base_path():
    """
    Root endpoint to verify that the API is running.

    Returns:
        dict: A success message.
    """
    return {"success": True}
