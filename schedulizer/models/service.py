from typing import Optional
from sqlmodel import SQLModel, Field


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    organization_id: int = Field(foreign_key="organization.id", index=True)

    name: str
    description: Optional[str] = None
    duration_minutes: int
    price: float
    active: bool = True


class ServiceCreate(SQLModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    duration_minutes: int = Field(gt=0, le=24 * 60)
    price: float = Field(ge=0)
    active: bool = True


class ServiceUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0, le=24 * 60)
    price: Optional[float] = Field(default=None, ge=0)
    active: Optional[bool] = None
