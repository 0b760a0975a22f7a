from typing import Optional
from pydantic import BaseModel


class UserDTO(BaseModel):
    """User as exchanged with the identity provider; two users are equal when their ids are"""
    id: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, UserDTO):
            return False
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __str__(self):
        return self.username or ""
