import logging
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session, select

from schedulizer.config import settings
from schedulizer.core.slots import (
    calculate_available_slots,
    find_conflicting_appointment,
    is_within_availability,
    to_utc_naive,
)
from schedulizer.database import get_session
from schedulizer.models.appointment import Appointment, AppointmentCreate, AppointmentReschedule
from schedulizer.models.organization import Organization
from schedulizer.models.service import Service


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/booking", tags=["booking"])

CANCELLABLE_STATUSES = ("pending", "confirmed")


def _get_organization_by_slug(session: Session, slug: str) -> Organization:
    organization = session.exec(
        select(Organization).where(Organization.slug == slug)
    ).first()
    if not organization:
        raise HTTPException(status_code=404, detail="Organização não encontrada")
    return organization


def _get_active_service(session: Session, organization: Organization, service_id: int) -> Service:
    service = session.get(Service, service_id)
    if not service or service.organization_id != organization.id or not service.active:
        raise HTTPException(status_code=404, detail="Serviço não encontrado ou inativo")
    return service


def _get_by_token(session: Session, token: str) -> Appointment:
    appt = session.exec(
        select(Appointment).where(Appointment.management_token == token)
    ).first()
    if not appt:
        raise HTTPException(status_code=404, detail="Agendamento não encontrado")
    return appt


def _check_bookable(
    session: Session,
    service: Service,
    organization: Organization,
    start: datetime,
) -> datetime:
    if start <= datetime.utcnow():
        raise HTTPException(status_code=400, detail="Não é possível agendar no passado")

    if not is_within_availability(session, service, organization, start):
        raise HTTPException(status_code=400, detail="Horário fora da disponibilidade do serviço")

    return start + timedelta(minutes=service.duration_minutes)


# =========================
# PÁGINA PÚBLICA
# =========================
@router.get("/{slug}")
def get_booking_page(slug: str, session: Session = Depends(get_session)):
    organization = _get_organization_by_slug(session, slug)

    services = session.exec(
        select(Service).where(
            Service.organization_id == organization.id,
            Service.active == True,  # noqa: E712
        )
    ).all()

    return {
        "organization_name": organization.name,
        "slug": organization.slug,
        "timezone": organization.timezone,
        "services": [
            {
                "id": s.id,
                "name": s.name,
                "description": s.description,
                "duration_minutes": s.duration_minutes,
                "price": s.price,
            }
            for s in services
        ],
    }


# =========================
# HORÁRIOS DISPONÍVEIS
# GET /booking/minha-barbearia/services/1/slots?date=2026-02-14
# =========================
@router.get("/{slug}/services/{service_id}/slots")
def get_slots(
    slug: str,
    service_id: int,
    day: date = Query(alias="date"),
    session: Session = Depends(get_session),
):
    organization = _get_organization_by_slug(session, slug)

    today = datetime.now(ZoneInfo(organization.timezone)).date()
    if day < today:
        raise HTTPException(status_code=400, detail="Data não pode estar no passado")
    if day > today + timedelta(days=settings.booking_max_future_days):
        raise HTTPException(
            status_code=400,
            detail=f"Data não pode passar de {settings.booking_max_future_days} dias no futuro",
        )

    service = _get_active_service(session, organization, service_id)

    return {
        "service_id": service.id,
        "date": day.isoformat(),
        "duration_minutes": service.duration_minutes,
        "slots": calculate_available_slots(session, service, organization, day),
    }


# =========================
# CRIAR AGENDAMENTO (CLIENTE)
# =========================
@router.post("/{slug}/appointments", status_code=status.HTTP_201_CREATED)
def create_appointment(
    slug: str,
    payload: AppointmentCreate,
    session: Session = Depends(get_session),
):
    organization = _get_organization_by_slug(session, slug)
    service = _get_active_service(session, organization, payload.service_id)

    start = to_utc_naive(payload.start_time)
    end = _check_bookable(session, service, organization, start)

    try:
        # trava o serviço: dois clientes no mesmo horário não passam juntos
        session.exec(select(Service).where(Service.id == service.id).with_for_update()).one()

        if find_conflicting_appointment(session, service.id, start, end):
            session.rollback()
            logger.warning("Slot conflict service=%s start=%s", service.id, start.isoformat())
            raise HTTPException(status_code=409, detail="Horário não está mais disponível")

        appt = Appointment(
            organization_id=organization.id,
            service_id=service.id,
            start_datetime=start,
            end_datetime=end,
            customer_name=payload.customer_name,
            customer_email=payload.customer_email,
            customer_phone=payload.customer_phone,
            service_name_snapshot=service.name,
            service_price_snapshot=service.price,
            service_duration_snapshot=service.duration_minutes,
        )
        session.add(appt)
        session.commit()
    except HTTPException:
        raise
    except Exception:
        session.rollback()
        logger.exception("Create appointment error service=%s", service.id)
        raise

    session.refresh(appt)
    logger.info(
        "Appointment created id=%s organization=%s service=%s start=%s",
        appt.id,
        organization.id,
        service.id,
        start.isoformat(),
    )
    return appt


# =========================
# GERENCIAR PELO LINK (token)
# =========================
@router.get("/manage/{token}")
def get_managed_appointment(token: str, session: Session = Depends(get_session)):
    return _get_by_token(session, token)


@router.post("/manage/{token}/cancel")
def cancel_managed_appointment(
    token: str,
    reason: str = "Cancelado pelo cliente",
    session: Session = Depends(get_session),
):
    appt = _get_by_token(session, token)

    if appt.status not in CANCELLABLE_STATUSES:
        raise HTTPException(status_code=400, detail="Não é possível cancelar nesse status")

    appt.status = "cancelled"
    appt.cancelled_at = datetime.utcnow()
    appt.cancelled_by = "customer"
    appt.cancel_reason = reason

    session.add(appt)
    session.commit()
    session.refresh(appt)

    logger.info("Appointment cancelled id=%s by=customer", appt.id)
    return appt


@router.post("/manage/{token}/reschedule")
def reschedule_managed_appointment(
    token: str,
    payload: AppointmentReschedule,
    session: Session = Depends(get_session),
):
    appt = _get_by_token(session, token)

    if appt.status not in CANCELLABLE_STATUSES:
        raise HTTPException(status_code=400, detail="Não é possível remarcar nesse status")

    service = session.get(Service, appt.service_id)
    organization = session.get(Organization, appt.organization_id)

    start = to_utc_naive(payload.start_time)
    end = _check_bookable(session, service, organization, start)

    try:
        session.exec(select(Service).where(Service.id == service.id).with_for_update()).one()

        if find_conflicting_appointment(session, service.id, start, end, exclude_id=appt.id):
            session.rollback()
            logger.warning(
                "Reschedule conflict appointment=%s service=%s start=%s",
                appt.id,
                service.id,
                start.isoformat(),
            )
            raise HTTPException(status_code=409, detail="Horário não está mais disponível")

        appt.start_datetime = start
        appt.end_datetime = end
        # remarcação volta para pendente
        appt.status = "pending"

        session.add(appt)
        session.commit()
    except HTTPException:
        raise
    except Exception:
        session.rollback()
        logger.exception("Reschedule appointment error service=%s", service.id)
        raise

    session.refresh(appt)

    logger.info("Appointment rescheduled id=%s start=%s", appt.id, start.isoformat())
    return appt
