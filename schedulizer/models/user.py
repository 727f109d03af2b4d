from typing import Literal, Optional
from sqlmodel import SQLModel, Field


class UserBase(SQLModel):
    name: str
    email: str = Field(index=True, unique=True)
    role: str  # "owner" ou "customer"


class User(UserBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    password_hash: str

    # dono de organização (multi-tenant)
    organization_id: Optional[int] = Field(default=None, foreign_key="organization.id", index=True)


class UserCreate(UserBase):
    role: Literal["owner", "customer"] = "owner"
    password: str = Field(min_length=8)
