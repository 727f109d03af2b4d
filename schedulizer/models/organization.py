import re
from typing import Optional
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from sqlmodel import SQLModel, Field


SLUG_PATTERN = r"^[a-z0-9-]{3,50}$"


def _check_timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"timezone inválido: {value}")
    return value


class Organization(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    name: str
    slug: str = Field(index=True, unique=True)

    # IANA, ex: America/Sao_Paulo
    timezone: str = "America/Sao_Paulo"

    created_at: datetime = Field(default_factory=datetime.utcnow)


class OrganizationCreate(SQLModel):
    name: str = Field(min_length=1)
    slug: str
    timezone: str = "America/Sao_Paulo"

    @field_validator("slug")
    @classmethod
    def _valid_slug(cls, value: str) -> str:
        if not re.fullmatch(SLUG_PATTERN, value):
            raise ValueError("slug deve ter de 3 a 50 caracteres (a-z, 0-9 ou hífen)")
        return value

    @field_validator("timezone")
    @classmethod
    def _valid_timezone(cls, value: str) -> str:
        return _check_timezone(value)


class OrganizationUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1)
    timezone: Optional[str] = None

    @field_validator("timezone")
    @classmethod
    def _valid_timezone(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _check_timezone(value)
