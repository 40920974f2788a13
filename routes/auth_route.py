from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from auth import get_current_user
from database import get_db
from models import *
from services.auth_service import AuthService

auth_router = APIRouter(
    prefix="/auth",
    tags=["Auth"]
)


@auth_router.post("/register", response_model=Token, tags=["Auth"])
def register_user(user: UserCreate, db: Session = Depends(get_db)):
    return AuthService(db).register(user)


@auth_router.post("/login", response_model=Token, tags=["Auth"])
def login(request: LoginRequest, db: Session = Depends(get_db)):
    return AuthService(db).login(request.username, request.password)


# Formular-Login für Swagger UI
@auth_router.post("/token", response_model=Token, tags=["Auth"])
def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    return AuthService(db).login(form_data.username, form_data.password)


@auth_router.post("/refresh", response_model=Token, tags=["Auth"])
def refresh_token(request: RefreshTokenRequest, db: Session = Depends(get_db)):
    return AuthService(db).refresh(request.refresh_token)


@auth_router.post("/logout", tags=["Auth"])
def logout(request: RefreshTokenRequest, db: Session = Depends(get_db)):
    AuthService(db).logout(request.refresh_token)
    return {"success": True}


@auth_router.get("/me", response_model=User, tags=["Auth"])
def read_users_me(current_user: UserDB = Depends(get_current_user)):
    return current_user
