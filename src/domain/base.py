"""Shared base for SQLModel domain entities"""

from sqlmodel import SQLModel


class BaseModel(SQLModel):
    """Base class for all persisted domain entities"""

    pass
