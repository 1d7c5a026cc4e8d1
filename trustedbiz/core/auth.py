# trustedbiz/core/auth.py

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from trustedbiz.database import get_db
from trustedbiz.models.users import User
from trustedbiz.core.jwt import decode_access_token
from trustedbiz.core.oauth2 import oauth2_scheme, optional_oauth2_scheme


def _user_from_token(token: str, db: Session) -> User:
    payload = decode_access_token(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    user_id = payload.get("sub")

    if user_id is None or not str(user_id).isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    user = db.query(User).filter(User.id == int(user_id)).first()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
):
    return _user_from_token(token, db)


def get_optional_user(
    token: str | None = Depends(optional_oauth2_scheme),
    db: Session = Depends(get_db),
):
    # No Authorization header means an anonymous visitor
    if token is None:
        return None

    return _user_from_token(token, db)


def get_admin_user(
    current_user: User = Depends(get_current_user),
):
    # Admin flag is read from the database row, not the token claims
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Admin access required",
        )
    return current_user
