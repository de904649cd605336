from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID

from finance4all.db.core import CategoryType


HEX_COLOR_PATTERN = r'^#[0-9A-Fa-f]{6}$'

# ===== CATEGORY PYDANTIC MODELS =====

class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, description="Category name")
    type: CategoryType = Field(..., description="INCOME or EXPENSE")
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN, description="Hex color, e.g. #1A73E8")
    icon: Optional[str] = Field(None, max_length=50, description="Icon identifier")
    parent_id: Optional[UUID] = Field(None, description="The ID of the parent category, for sub-categories")


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    type: Optional[CategoryType] = None
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    icon: Optional[str] = Field(None, max_length=50)
    parent_id: Optional[UUID] = None


class CategoryResponse(CategoryBase):
    id: UUID
    user_id: UUID
    is_default: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
