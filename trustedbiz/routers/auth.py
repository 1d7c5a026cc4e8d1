from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import SQLAlchemyError
import logging

from trustedbiz.database import get_db
from trustedbiz.models.users import User
from trustedbiz.schemas.user import UserCreate
from trustedbiz.core.hashing import hash_password, verify_password, validate_new_password
from trustedbiz.core.jwt import create_user_token
from trustedbiz.core.rate_limiter import limiter

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

logger = logging.getLogger("trustedbiz")


# ---------------- SIGNUP ----------------
@router.post("/signup", status_code=status.HTTP_201_CREATED)
@limiter.limit("3/minute")
def signup(request: Request, user_data: UserCreate, db: Session = Depends(get_db)):
    validate_new_password(user_data.password)

    if db.query(User).filter(User.email == user_data.email).first():
        raise HTTPException(status_code=409, detail="User already exists with this email")

    try:
        user = User(
            email=user_data.email,
            password_hash=hash_password(user_data.password),
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            is_admin=False,
        )
        db.add(user)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Signup failed")
        raise HTTPException(status_code=500, detail="Unable to create account")

    return {"message": "User created successfully"}

# ---------------- LOGIN (TOKEN-BASED) ----------------
@router.post("/login")
@limiter.limit("5/minute")
def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.email == form_data.username).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return {
        "access_token": create_user_token(user),
        "token_type": "bearer"
    }


# ---------------- LOGOUT ----------------
@router.post("/logout")
def logout():
    # Tokens are stateless; the client drops its copy
    return {"message": "Logged out successfully"}
