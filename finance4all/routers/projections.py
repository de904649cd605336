from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from finance4all.auth import get_current_user
from finance4all.crud import crud_projection
from finance4all.db.core import get_db, UserDB
from finance4all.models import projection as projection_models
from finance4all.models.analytics import ProjectionResult
from finance4all.services import calculations

router = APIRouter(
    prefix="/projections",
    tags=["projections"],
)


@router.post("", response_model=projection_models.ProjectionResponse, status_code=status.HTTP_201_CREATED)
def create_projection(
    projection: projection_models.ProjectionCreate,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Save a named projection scenario.
    """
    return crud_projection.create_db_projection(db=db, user_id=current_user.id, projection_data=projection)


@router.get("", response_model=List[projection_models.ProjectionResponse])
def read_projections(
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    return crud_projection.read_db_projections(db=db, user_id=current_user.id)


@router.get("/{projection_id}", response_model=projection_models.ProjectionResponse)
def read_projection(
    projection_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    return crud_projection.read_db_projection(db=db, projection_id=projection_id, user_id=current_user.id)


@router.post("/{projection_id}/run", response_model=ProjectionResult)
def run_projection(
    projection_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    """
    Run a saved scenario against the user's current finances.
    """
    db_projection = crud_projection.read_db_projection(db=db, projection_id=projection_id, user_id=current_user.id)
    return calculations.calculate_projection(
        db, current_user, crud_projection.projection_assumptions(db_projection),
        default_age=request.app.state.settings.DEFAULT_BASE_AGE
    )


@router.put("/{projection_id}", response_model=projection_models.ProjectionResponse)
def update_projection(
    projection_id: UUID,
    projection: projection_models.ProjectionUpdate,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    return crud_projection.update_db_projection(
        db=db, projection_id=projection_id, user_id=current_user.id, projection_updates=projection
    )


@router.delete("/{projection_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_projection(
    projection_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserDB = Depends(get_current_user)
):
    crud_projection.delete_db_projection(db=db, projection_id=projection_id, user_id=current_user.id)
