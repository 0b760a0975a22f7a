from sqlalchemy import Column, Integer, String
from ..core.database import Base


class Category(Base):
    """Category model for database"""
    __tablename__ = "category"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(255), nullable=False)

    # Keycloak user UUID taken from the access token
    user_id = Column(String(64), nullable=False, index=True)

    def __repr__(self):
        return f"<Category(id={self.id}, title='{self.title}', user_id='{self.user_id}')>"
