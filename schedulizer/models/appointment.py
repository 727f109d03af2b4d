import secrets
from typing import Optional
from datetime import datetime

from pydantic import EmailStr
from sqlmodel import SQLModel, Field


def _new_token() -> str:
    return secrets.token_urlsafe(24)


class Appointment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    organization_id: int = Field(foreign_key="organization.id", index=True)
    service_id: int = Field(foreign_key="service.id", index=True)

    # UTC (naive)
    start_datetime: datetime = Field(index=True)
    end_datetime: datetime = Field(index=True)

    # cliente da página pública (sem conta)
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None

    # SNAPSHOT DO SERVIÇO
    service_name_snapshot: str
    service_price_snapshot: float
    service_duration_snapshot: int

    # STATUS DO AGENDAMENTO
    status: str = Field(default="pending", index=True)
    # pending | confirmed | cancelled | completed

    management_token: str = Field(default_factory=_new_token, index=True, unique=True)

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)

    cancelled_at: Optional[datetime] = Field(default=None, index=True)
    cancelled_by: Optional[str] = None
    cancel_reason: Optional[str] = None


class AppointmentCreate(SQLModel):
    service_id: int
    start_time: datetime
    customer_name: str = Field(min_length=1)
    customer_email: EmailStr
    customer_phone: Optional[str] = None


class AppointmentReschedule(SQLModel):
    start_time: datetime
