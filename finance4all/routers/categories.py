from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from finance4all.auth import get_current_user
from finance4all.crud import crud_category
from finance4all.db.core import get_db, UserDB, CategoryType
from finance4all.models import category as category_models

router = APIRouter(
    prefix="/categories",
    tags=["categories"],
)


@router.post("", response_model=category_models.CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category: category_models.CategoryCreate,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    return crud_category.create_db_category(db=db, user_id=current_user.id, category_data=category)


@router.get("", response_model=List[category_models.CategoryResponse])
def read_categories(
    type: Optional[CategoryType] = None,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Retrieve the current user's categories, including the defaults created at registration.
    """
    return crud_category.read_db_categories(db=db, user_id=current_user.id, category_type=type)


@router.get("/{category_id}", response_model=category_models.CategoryResponse)
def read_category(
    category_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    return crud_category.read_db_category(db=db, category_id=category_id, user_id=current_user.id)


@router.put("/{category_id}", response_model=category_models.CategoryResponse)
def update_category(
    category_id: UUID,
    category: category_models.CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    return crud_category.update_db_category(
        db=db, category_id=category_id, user_id=current_user.id, category_updates=category
    )


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Delete a category. Its transactions become uncategorized.
    """
    crud_category.delete_db_category(db=db, category_id=category_id, user_id=current_user.id)
