# trustedbiz/routers/admin_users.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session
import logging

from trustedbiz.database import get_db
from trustedbiz.core.auth import get_admin_user
from trustedbiz.core.hashing import hash_password, validate_new_password
from trustedbiz.core.moderation import UserAction, ensure_not_self_demotion, parse_action, set_admin_flag
from trustedbiz.core.query import PageRequest, paginate
from trustedbiz.models.users import User
from trustedbiz.schemas.user import AdminUserCreate, AdminUserListResponse, UserActionRequest, UserResponse

router = APIRouter(prefix="/api/admin/users", tags=["Admin"])

logger = logging.getLogger("trustedbiz")

ADMIN_PAGE_SIZE = 50


@router.get("", response_model=AdminUserListResponse)
def list_users(
    filter: str = "all",
    page: int = 1,
    limit: int | None = None,
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    page_request = PageRequest.build(page, limit, default_limit=ADMIN_PAGE_SIZE)

    query = db.query(User).order_by(User.created_at.desc(), User.id.desc())

    if filter == "admin":
        query = query.filter(User.is_admin.is_(True))
    elif filter == "regular":
        query = query.filter(or_(User.is_admin.is_(False), User.is_admin.is_(None)))

    users, pagination = paginate(query, page_request)

    return {
        "users": [
            {
                "id": user.id,
                "name": user.full_name or "Unknown",
                "email": user.email,
                "is_admin": bool(user.is_admin),
                "created_at": user.created_at,
            }
            for user in users
        ],
        "pagination": pagination,
    }


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: AdminUserCreate,
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    validate_new_password(user_data.password)

    if db.query(User).filter(User.email == user_data.email).first():
        raise HTTPException(status_code=409, detail="User already exists with this email")

    user = User(
        email=user_data.email,
        password_hash=hash_password(user_data.password),
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        is_admin=user_data.is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Admin {admin.id} created user {user.id}")

    return user


@router.post("/action")
def user_action(
    action_data: UserActionRequest,
    db: Session = Depends(get_db),
    admin = Depends(get_admin_user),
):
    if not action_data.user_id or not action_data.action:
        raise HTTPException(status_code=400, detail="User ID and action are required")

    action = parse_action(UserAction, action_data.action)

    # Checked before any lookup so it cannot be bypassed
    ensure_not_self_demotion(admin, action_data.user_id, action)

    set_admin_flag(db, action_data.user_id, action)

    logger.info(f"Admin {admin.id} applied {action.value} to user {action_data.user_id}")

    return {"success": True}
