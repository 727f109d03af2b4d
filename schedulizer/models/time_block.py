from typing import Optional
from datetime import date, datetime

from pydantic import field_validator, model_validator
from sqlmodel import SQLModel, Field

from schedulizer.models.schedule import check_time_format


class TimeBlock(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    organization_id: int = Field(foreign_key="organization.id", index=True)

    # bloqueio vale para um dia, em horário local da organização
    day: date = Field(index=True)
    start_time: str = Field(max_length=5)
    end_time: str = Field(max_length=5)

    reason: str = "Bloqueio"

    created_at: datetime = Field(default_factory=datetime.utcnow)


class TimeBlockCreate(SQLModel):
    day: date
    start_time: str
    end_time: str
    reason: str = "Bloqueio"

    @field_validator("start_time", "end_time")
    @classmethod
    def _hhmm(cls, value: str) -> str:
        return check_time_format(value)

    @model_validator(mode="after")
    def _end_after_start(self) -> "TimeBlockCreate":
        if self.end_time <= self.start_time:
            raise ValueError("end_time deve ser maior que start_time")
        return self
