from sqlmodel import SQLModel, Field
from sqlalchemy import Column
from uuid import UUID, uuid4
from datetime import datetime

from app.backend.models.common import UTCDateTime, utcnow


class User(SQLModel, table=True):
    __tablename__ = "user"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    # salted one-way hash (passlib pbkdf2_sha256); never the password itself
    credential_secret: str
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(UTCDateTime(), nullable=False),
    )
