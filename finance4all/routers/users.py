from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from finance4all.auth import Claims, require_claims, require_admin, get_current_user
from finance4all.crud import crud_user
from finance4all.db.core import get_db, UserDB, UserRole
from finance4all.errors import NotFoundError, ForbiddenError
from finance4all.models import user as user_models

router = APIRouter(
    prefix="/users",
    tags=["users"],
)


@router.post("", response_model=user_models.UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user: user_models.UserCreate,
    claims: Claims = Depends(require_claims),
    db: Session = Depends(get_db)
):
    """
    Register the authenticated caller. Default categories are created with the user.
    """
    return crud_user.create_db_user(db=db, firebase_uid=claims.uid, user_data=user)


@router.get("/me", response_model=user_models.UserResponse)
def read_me(current_user: UserDB = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=user_models.UserResponse)
def update_me(
    user: user_models.UserUpdate,
    current_user: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return crud_user.update_db_user(db=db, db_user=current_user, user_updates=user)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_me(
    current_user: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete the caller's account and everything they own.
    """
    crud_user.delete_db_user(db=db, db_user=current_user)


@router.get("", response_model=List[user_models.UserResponse])
def read_users(
    skip: int = 0,
    limit: int = 100,
    _admin: Claims = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    List all users. Admin only.
    """
    return crud_user.read_db_users(db=db, skip=skip, limit=limit)


@router.get("/{user_id}", response_model=user_models.UserResponse)
def read_user(
    user_id: UUID,
    claims: Claims = Depends(require_claims),
    db: Session = Depends(get_db)
):
    """
    Retrieve a user by ID. Users may only read themselves unless they are admins.
    """
    db_user = crud_user.read_db_user(db=db, user_id=user_id)
    if db_user is None:
        raise NotFoundError("User not found")
    if db_user.firebase_uid != claims.uid and claims.role != UserRole.ADMIN:
        raise ForbiddenError()
    return db_user
