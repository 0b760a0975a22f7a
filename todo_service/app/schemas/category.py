"""
Pydantic schemas for Todo Service.
"""
from typing import Optional
from pydantic import BaseModel, Field


class CategoryBase(BaseModel):
    """Base category schema"""
    title: Optional[str] = Field(None, description="Category title")
    user_id: Optional[str] = Field(None, alias="userId", description="Owner user id")

    class Config:
        populate_by_name = True


class CategoryIn(CategoryBase):
    """Category as sent by the client for add and update"""
    id: Optional[int] = Field(None, description="Category ID, assigned by storage")


class CategoryResponse(CategoryBase):
    """Schema for category response"""
    id: int = Field(..., description="Category ID")
    title: str = Field(..., description="Category title")
    user_id: str = Field(..., alias="userId", description="Owner user id")

    class Config:
        from_attributes = True
        populate_by_name = True


class CategorySearchValues(BaseModel):
    """Search filter for categories"""
    title: Optional[str] = Field(None, description="Case-insensitive part of the title")
    user_id: Optional[str] = Field(None, alias="userId", description="Owner user id, taken from the token")

    class Config:
        populate_by_name = True
