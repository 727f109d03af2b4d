from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from sqlmodel import Session, select

from schedulizer.core.schedule_validation import minutes_to_time, time_to_minutes
from schedulizer.models.appointment import Appointment
from schedulizer.models.organization import Organization
from schedulizer.models.schedule import Schedule, SchedulePeriod
from schedulizer.models.service import Service
from schedulizer.models.time_block import TimeBlock


def day_of_week(day: date) -> int:
    # 0=domingo ... 6=sábado
    return day.isoweekday() % 7


def local_to_utc(day: date, hhmm: str, tz_name: str) -> datetime:
    """Converte data + HH:MM local da organização para UTC naive (formato do banco)."""
    hours, minutes = (int(part) for part in hhmm.split(":"))
    local = datetime.combine(day, time(hours, minutes), tzinfo=ZoneInfo(tz_name))
    return local.astimezone(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    # datetime sem timezone é tratado como UTC
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _overlaps(a_start, a_end, b_start, b_end) -> bool:
    """Retorna True se [a_start, a_end) sobrepõe [b_start, b_end)."""
    return a_start < b_end and a_end > b_start


def _as_offset(hhmm: str) -> timedelta:
    return timedelta(minutes=time_to_minutes(hhmm))


def find_conflicting_appointment(
    session: Session,
    service_id: int,
    start: datetime,
    end: datetime,
    exclude_id: Optional[int] = None,
) -> Optional[Appointment]:
    query = select(Appointment).where(
        Appointment.service_id == service_id,
        Appointment.status != "cancelled",
        Appointment.start_datetime < end,
        Appointment.end_datetime > start,
    )
    if exclude_id is not None:
        query = query.where(Appointment.id != exclude_id)
    return session.exec(query).first()


def is_within_availability(
    session: Session,
    service: Service,
    organization: Organization,
    start_utc: datetime,
) -> bool:
    """Horário cai inteiro dentro de um período ativo e fora de bloqueios."""
    local_start = start_utc.replace(tzinfo=timezone.utc).astimezone(ZoneInfo(organization.timezone))
    day = local_start.date()

    # compara com precisão total (segundos e microssegundos contam)
    start_offset = local_start - local_start.replace(hour=0, minute=0, second=0, microsecond=0)
    end_offset = start_offset + timedelta(minutes=service.duration_minutes)

    schedule = session.exec(
        select(Schedule).where(
            Schedule.service_id == service.id,
            Schedule.day_of_week == day_of_week(day),
        )
    ).first()
    if not schedule or not schedule.is_active:
        return False

    periods = session.exec(
        select(SchedulePeriod).where(SchedulePeriod.schedule_id == schedule.id)
    ).all()
    inside = any(
        _as_offset(p.start_time) <= start_offset and end_offset <= _as_offset(p.end_time)
        for p in periods
    )
    if not inside:
        return False

    blocks = session.exec(
        select(TimeBlock).where(
            TimeBlock.organization_id == organization.id,
            TimeBlock.day == day,
        )
    ).all()
    return not any(
        _overlaps(start_offset, end_offset, _as_offset(b.start_time), _as_offset(b.end_time))
        for b in blocks
    )


def calculate_available_slots(
    session: Session,
    service: Service,
    organization: Organization,
    day: date,
    now: Optional[datetime] = None,
) -> List[Dict[str, str]]:
    now = now or datetime.utcnow()
    duration = service.duration_minutes

    schedule = session.exec(
        select(Schedule).where(
            Schedule.service_id == service.id,
            Schedule.day_of_week == day_of_week(day),
        )
    ).first()
    if not schedule or not schedule.is_active:
        return []

    periods = session.exec(
        select(SchedulePeriod)
        .where(SchedulePeriod.schedule_id == schedule.id)
        .order_by(SchedulePeriod.start_time)
    ).all()
    if not periods:
        return []

    blocks: List[Tuple[int, int]] = [
        (time_to_minutes(b.start_time), time_to_minutes(b.end_time))
        for b in session.exec(
            select(TimeBlock).where(
                TimeBlock.organization_id == organization.id,
                TimeBlock.day == day,
            )
        ).all()
    ]

    tz = organization.timezone
    day_start_utc = local_to_utc(day, "00:00", tz)
    day_end_utc = local_to_utc(day + timedelta(days=1), "00:00", tz)

    appointments = session.exec(
        select(Appointment).where(
            Appointment.service_id == service.id,
            Appointment.status != "cancelled",
            Appointment.start_datetime < day_end_utc,
            Appointment.end_datetime > day_start_utc,
        )
    ).all()

    slots: List[Dict[str, str]] = []
    for period in periods:
        slot_start = time_to_minutes(period.start_time)
        period_end = time_to_minutes(period.end_time)

        while slot_start + duration <= period_end:
            slot_end = slot_start + duration

            blocked = any(_overlaps(slot_start, slot_end, b_start, b_end) for b_start, b_end in blocks)
            if not blocked:
                start_utc = local_to_utc(day, minutes_to_time(slot_start), tz)
                end_utc = local_to_utc(day, minutes_to_time(slot_end), tz)

                booked = any(
                    _overlaps(start_utc, end_utc, a.start_datetime, a.end_datetime)
                    for a in appointments
                )
                if not booked and start_utc > now:
                    slots.append({
                        "start": start_utc.replace(tzinfo=timezone.utc).isoformat(),
                        "end": end_utc.replace(tzinfo=timezone.utc).isoformat(),
                    })

            slot_start += duration

    return slots
