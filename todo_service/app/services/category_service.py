"""
Data access for categories.
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundError
from ..models.category import Category


class CategoryService:
    """Category persistence operations, one call per endpoint."""

    def __init__(self, db: Session):
        self.db = db

    def find_all(self, user_id: str) -> List[Category]:
        """All categories of a user ordered by title."""
        return self.db.query(Category).filter(
            Category.user_id == user_id
        ).order_by(Category.title.asc()).all()

    def add(self, category: Category) -> Category:
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def update(self, category: Category) -> Category:
        """
        Save the category by id, inserting it when the id is unknown.

        Args:
            category: Detached category carrying the id to save under

        Returns:
            The persisted category

        Raises:
            NotFoundError: If the id belongs to another user's category
        """
        existing = self.db.get(Category, category.id)
        if existing is not None and existing.user_id != category.user_id:
            raise NotFoundError(f"id={category.id} not found")
        merged = self.db.merge(category)
        self.db.commit()
        self.db.refresh(merged)
        return merged

    def delete_by_id(self, category_id: int) -> None:
        """
        Raises:
            NotFoundError: If no category has this id
        """
        category = self.db.get(Category, category_id)
        if category is None:
            raise NotFoundError(f"id={category_id} not found")
        self.db.delete(category)
        self.db.commit()

    def find_by_id(self, category_id: int) -> Category:
        """
        Raises:
            NotFoundError: If no category has this id
        """
        category = self.db.get(Category, category_id)
        if category is None:
            raise NotFoundError(f"id={category_id} not found")
        return category

    def find_by_title(self, title: Optional[str], user_id: str) -> List[Category]:
        """
        Categories of a user whose title contains the given text, ignoring case.
        An empty or missing title matches every category of the user.
        """
        query = self.db.query(Category).filter(Category.user_id == user_id)
        if title:
            query = query.filter(Category.title.ilike(f"%{title}%"))
        return query.order_by(Category.title.asc()).all()
