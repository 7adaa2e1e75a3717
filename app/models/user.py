"""
User and principal models.

Users are owned by the authentication collaborator; this service only reads
them to decide who may do what and who gets notified.
"""

from pydantic import BaseModel, Field
from enum import Enum
from typing import Optional


class UserType(str, Enum):
    PUBLIC = "public"
    OFFICIAL = "official"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: Optional[str]) -> "UserType":
        """Unknown or legacy values (e.g. "user") fall back to PUBLIC."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.PUBLIC


class Principal(BaseModel):
    """The authenticated actor issuing a request."""
    id: str
    email: str
    name: str = ""
    user_type: UserType = UserType.PUBLIC

    def snapshot(self) -> "PersonSnapshot":
        return PersonSnapshot(id=self.id, name=self.name, email=self.email)


class PersonSnapshot(BaseModel):
    """
    Immutable value copy of a principal, embedded in incidents and comments.
    Not a live reference: later edits to the user record do not flow here.
    """
    id: Optional[str] = None
    name: str = ""
    email: str = Field(..., description="Owner identity for authorization")

    class Config:
        frozen = True
