import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from schedulizer.core.security import get_current_organization
from schedulizer.core.slots import to_utc_naive
from schedulizer.database import get_session
from schedulizer.models.appointment import Appointment
from schedulizer.models.organization import Organization


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])

FINAL_STATUSES = ("cancelled", "completed")


def _get_owned_appointment(session: Session, appointment_id: int, organization: Organization) -> Appointment:
    appt = session.get(Appointment, appointment_id)
    if not appt:
        raise HTTPException(status_code=404, detail="Agendamento não encontrado")

    if appt.organization_id != organization.id:
        raise HTTPException(status_code=403, detail="Sem permissão")

    return appt


def _local_day_bounds(day: date, tz_name: str):
    start = datetime.combine(day, time(0, 0), tzinfo=ZoneInfo(tz_name))
    return to_utc_naive(start), to_utc_naive(start + timedelta(days=1))


# =========================
# LISTAR AGENDAMENTOS DA ORGANIZAÇÃO
# GET /appointments/?from=2026-02-01&to=2026-02-07
# =========================
@router.get("/", response_model=List[Appointment])
def list_appointments(
    from_day: Optional[date] = Query(default=None, alias="from"),
    to_day: Optional[date] = Query(default=None, alias="to"),
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    query = select(Appointment).where(Appointment.organization_id == organization.id)

    if from_day:
        query = query.where(Appointment.start_datetime >= _local_day_bounds(from_day, organization.timezone)[0])
    if to_day:
        query = query.where(Appointment.start_datetime < _local_day_bounds(to_day, organization.timezone)[1])

    return session.exec(query.order_by(Appointment.start_datetime)).all()


# =========================
# CONFIRMAR
# =========================
@router.patch("/{appointment_id}/confirm", response_model=Appointment)
def confirm_appointment(
    appointment_id: int,
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    appt = _get_owned_appointment(session, appointment_id, organization)

    if appt.status in FINAL_STATUSES:
        raise HTTPException(status_code=400, detail="Não é possível confirmar nesse status")

    appt.status = "confirmed"
    session.add(appt)
    session.commit()
    session.refresh(appt)
    return appt


# =========================
# FINALIZAR
# =========================
@router.patch("/{appointment_id}/complete", response_model=Appointment)
def complete_appointment(
    appointment_id: int,
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    appt = _get_owned_appointment(session, appointment_id, organization)

    if appt.status in FINAL_STATUSES:
        raise HTTPException(status_code=400, detail="Não é possível finalizar nesse status")

    appt.status = "completed"
    session.add(appt)
    session.commit()
    session.refresh(appt)
    return appt


# =========================
# CANCELAR (DONO pode sempre)
# =========================
@router.patch("/{appointment_id}/cancel", response_model=Appointment)
def cancel_appointment(
    appointment_id: int,
    reason: str = "Cancelado",
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    appt = _get_owned_appointment(session, appointment_id, organization)

    if appt.status == "cancelled":
        return appt

    if appt.status == "completed":
        raise HTTPException(status_code=400, detail="Não é possível cancelar nesse status")

    appt.status = "cancelled"
    appt.cancelled_at = datetime.utcnow()
    appt.cancelled_by = "owner"
    appt.cancel_reason = reason

    session.add(appt)
    session.commit()
    session.refresh(appt)

    logger.info("Appointment cancelled id=%s by=owner", appt.id)
    return appt
