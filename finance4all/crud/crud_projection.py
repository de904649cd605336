from sqlalchemy.orm import Session
from typing import Optional, List
from uuid import UUID

from finance4all.crud.base import read_owned, drop_nulls
from finance4all.db.core import ProjectionDB
from finance4all.errors import ConflictError
from finance4all.models.projection import ProjectionCreate, ProjectionUpdate, ProjectionAssumptions


def _check_unique_name(db: Session, user_id: UUID, name: str, exclude_id: Optional[UUID] = None) -> None:
    query = db.query(ProjectionDB).filter(ProjectionDB.user_id == user_id, ProjectionDB.name == name)
    if exclude_id is not None:
        query = query.filter(ProjectionDB.id != exclude_id)
    if query.first():
        raise ConflictError(f"Projection '{name}' already exists")


# ===== DATABASE OPERATIONS =====

def create_db_projection(db: Session, user_id: UUID, projection_data: ProjectionCreate) -> ProjectionDB:
    """Save a named what-if scenario"""
    name = projection_data.name.strip()
    _check_unique_name(db, user_id, name)

    db_projection = ProjectionDB(user_id=user_id, **projection_data.model_dump(exclude={"name"}), name=name)
    db.add(db_projection)
    db.commit()
    db.refresh(db_projection)
    return db_projection


def read_db_projection(db: Session, projection_id: UUID, user_id: UUID) -> ProjectionDB:
    return read_owned(db, ProjectionDB, projection_id, user_id, "Projection")


def read_db_projections(db: Session, user_id: UUID) -> List[ProjectionDB]:
    return db.query(ProjectionDB).filter(ProjectionDB.user_id == user_id).order_by(ProjectionDB.created_at.desc()).all()


def update_db_projection(db: Session, projection_id: UUID, user_id: UUID,
                         projection_updates: ProjectionUpdate) -> ProjectionDB:
    db_projection = read_db_projection(db, projection_id, user_id)
    update_data = drop_nulls(projection_updates.model_dump(exclude_unset=True),
                             ('name', 'income_growth_rate', 'investment_return', 'inflation_rate',
                              'expense_growth', 'years'))

    if 'name' in update_data:
        update_data['name'] = update_data['name'].strip()
        _check_unique_name(db, user_id, update_data['name'], exclude_id=projection_id)

    for field, value in update_data.items():
        setattr(db_projection, field, value)

    db.commit()
    db.refresh(db_projection)
    return db_projection


def delete_db_projection(db: Session, projection_id: UUID, user_id: UUID) -> bool:
    db_projection = read_db_projection(db, projection_id, user_id)
    db.delete(db_projection)
    db.commit()
    return True


def projection_assumptions(db_projection: ProjectionDB) -> ProjectionAssumptions:
    """The stored scenario as calculator input"""
    return ProjectionAssumptions.model_validate(db_projection, from_attributes=True)
