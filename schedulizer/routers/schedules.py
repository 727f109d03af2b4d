import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from schedulizer.core.schedule_validation import find_schedule_conflict
from schedulizer.core.security import get_current_organization, require_subscription
from schedulizer.database import get_session
from schedulizer.models.organization import Organization
from schedulizer.models.schedule import (
    DAYS_IN_WEEK,
    BulkUpsertSchedules,
    DayScheduleRead,
    PeriodRead,
    Schedule,
    SchedulePeriod,
)
from schedulizer.models.service import Service
from schedulizer.routers.services import get_owned_service


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/services",
    tags=["schedules"],
    dependencies=[Depends(require_subscription)],
)


def load_week(session: Session, service_id: int) -> List[DayScheduleRead]:
    """Semana completa (0..6); dia sem registro volta inativo e sem períodos."""
    schedules = session.exec(
        select(Schedule).where(Schedule.service_id == service_id)
    ).all()
    by_day = {s.day_of_week: s for s in schedules}

    week: List[DayScheduleRead] = []
    for day in range(DAYS_IN_WEEK):
        schedule = by_day.get(day)
        if schedule is None:
            week.append(DayScheduleRead(day_of_week=day, is_active=False))
            continue

        periods = session.exec(
            select(SchedulePeriod)
            .where(SchedulePeriod.schedule_id == schedule.id)
            .order_by(SchedulePeriod.start_time)
        ).all()
        week.append(
            DayScheduleRead(
                day_of_week=day,
                is_active=schedule.is_active,
                periods=[
                    PeriodRead(id=p.id, start_time=p.start_time, end_time=p.end_time)
                    for p in periods
                ],
            )
        )
    return week


@router.get("/{service_id}/schedules", response_model=List[DayScheduleRead])
def get_schedules(
    service_id: int,
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    service = get_owned_service(session, service_id, organization.id)
    return load_week(session, service.id)


# =========================
# SUBSTITUIÇÃO EM LOTE
# tudo ou nada: valida antes e grava numa transação só
# =========================
@router.put("/{service_id}/schedules", response_model=List[DayScheduleRead])
def replace_schedules(
    service_id: int,
    payload: BulkUpsertSchedules,
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    service = get_owned_service(session, service_id, organization.id)

    conflict = find_schedule_conflict(payload.schedules)
    if conflict:
        logger.warning(
            "Schedules rejected service=%s day=%s: overlapping periods",
            service.id,
            conflict.day_of_week,
        )
        raise HTTPException(status_code=400, detail=conflict.message)

    try:
        # trava o serviço: saves concorrentes do mesmo serviço ficam em fila
        session.exec(
            select(Service).where(Service.id == service.id).with_for_update()
        ).one()

        now = datetime.utcnow()
        for day in payload.schedules:
            schedule = session.exec(
                select(Schedule).where(
                    Schedule.service_id == service.id,
                    Schedule.day_of_week == day.day_of_week,
                )
            ).first()

            if schedule:
                schedule.is_active = day.is_active
                schedule.updated_at = now
                session.add(schedule)

                old_periods = session.exec(
                    select(SchedulePeriod).where(SchedulePeriod.schedule_id == schedule.id)
                ).all()
                for period in old_periods:
                    session.delete(period)
            else:
                schedule = Schedule(
                    service_id=service.id,
                    day_of_week=day.day_of_week,
                    is_active=day.is_active,
                    updated_at=now,
                )
                session.add(schedule)
                session.flush()

            for period in day.periods:
                session.add(
                    SchedulePeriod(
                        schedule_id=schedule.id,
                        start_time=period.start_time,
                        end_time=period.end_time,
                    )
                )

        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Update schedules error service=%s", service.id)
        raise

    logger.info("Schedules updated service=%s organization=%s", service.id, organization.id)
    return load_week(session, service.id)
