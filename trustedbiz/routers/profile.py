# trustedbiz/routers/profile.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from trustedbiz.database import get_db
from trustedbiz.core.auth import get_current_user
from trustedbiz.core.hashing import hash_password, verify_password, validate_new_password
from trustedbiz.models.users import User
from trustedbiz.schemas.user import PasswordChange, ProfileUpdate, UserResponse

router = APIRouter(prefix="/api/profile", tags=["Profile"])


@router.get("", response_model=UserResponse)
def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("")
def update_profile(
    profile_data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # Email must stay unique across accounts
    if profile_data.email != current_user.email:
        taken = (
            db.query(User)
            .filter(User.email == profile_data.email, User.id != current_user.id)
            .first()
        )
        if taken:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email is already taken",
            )

    current_user.email = profile_data.email
    current_user.first_name = profile_data.first_name
    current_user.last_name = profile_data.last_name

    db.commit()
    db.refresh(current_user)

    return {
        "message": "Profile updated successfully",
        "user": UserResponse.model_validate(current_user).model_dump(by_alias=True, mode="json"),
    }


@router.put("/password")
def change_password(
    password_data: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(password_data.current_password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        )

    validate_new_password(password_data.new_password)

    current_user.password_hash = hash_password(password_data.new_password)
    db.commit()

    return {"message": "Password updated successfully"}
