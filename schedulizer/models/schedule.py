import re
from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field as PydanticField, field_validator, model_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


DAYS_IN_WEEK = 7

# HH:MM 24h, zero-padded (comparação de string == cronológica)
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def check_time_format(value: str) -> str:
    if not TIME_PATTERN.fullmatch(value):
        raise ValueError("horário deve estar no formato HH:MM (00:00-23:59)")
    return value


# =========================
# TABELAS
# =========================

class Schedule(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("service_id", "day_of_week"),)

    id: Optional[int] = Field(default=None, primary_key=True)

    service_id: int = Field(foreign_key="service.id", index=True)

    # 0=domingo ... 6=sábado
    day_of_week: int = Field(index=True)

    is_active: bool = False

    updated_at: datetime = Field(default_factory=datetime.utcnow)


class SchedulePeriod(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    schedule_id: int = Field(foreign_key="schedule.id", index=True)

    start_time: str = Field(max_length=5)
    end_time: str = Field(max_length=5)


# =========================
# PAYLOADS (camelCase no JSON)
# =========================

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PeriodInput(_CamelModel):
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def _hhmm(cls, value: str) -> str:
        return check_time_format(value)

    @model_validator(mode="after")
    def _end_after_start(self) -> "PeriodInput":
        if self.end_time <= self.start_time:
            raise ValueError("endTime deve ser maior que startTime")
        return self


class DayScheduleInput(_CamelModel):
    day_of_week: int = PydanticField(ge=0, le=DAYS_IN_WEEK - 1)
    is_active: bool = True
    periods: List[PeriodInput] = PydanticField(default_factory=list)


class BulkUpsertSchedules(_CamelModel):
    schedules: List[DayScheduleInput] = PydanticField(min_length=1, max_length=DAYS_IN_WEEK)

    @model_validator(mode="after")
    def _unique_days(self) -> "BulkUpsertSchedules":
        days = [s.day_of_week for s in self.schedules]
        if len(days) != len(set(days)):
            raise ValueError("dayOfWeek repetido no payload")
        return self


class PeriodRead(_CamelModel):
    id: Optional[int] = None
    start_time: str
    end_time: str


class DayScheduleRead(_CamelModel):
    day_of_week: int
    is_active: bool
    periods: List[PeriodRead] = PydanticField(default_factory=list)
