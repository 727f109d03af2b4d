import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, func, select

from schedulizer.core.plans import ResolvedPlan
from schedulizer.core.security import get_current_organization, require_subscription
from schedulizer.database import get_session
from schedulizer.models.appointment import Appointment
from schedulizer.models.organization import Organization
from schedulizer.models.schedule import DAYS_IN_WEEK, Schedule, SchedulePeriod
from schedulizer.models.service import Service, ServiceCreate, ServiceUpdate


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/services",
    tags=["services"],
    dependencies=[Depends(require_subscription)],
)


def get_owned_service(session: Session, service_id: int, organization_id: int) -> Service:
    service = session.get(Service, service_id)
    if not service or service.organization_id != organization_id:
        raise HTTPException(status_code=404, detail="Serviço não encontrado")
    return service


def create_default_week(session: Session, service_id: int) -> None:
    # semana inteira começa fechada
    for day in range(DAYS_IN_WEEK):
        session.add(Schedule(service_id=service_id, day_of_week=day, is_active=False))


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=Service)
def create_service(
    payload: ServiceCreate,
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
    plan: ResolvedPlan = Depends(require_subscription),
):
    max_services = plan.limits.max_services
    if max_services is not None:
        total = session.exec(
            select(func.count()).select_from(Service).where(Service.organization_id == organization.id)
        ).one()
        if total >= max_services:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Limite de {max_services} serviços do plano {plan.type} atingido",
            )

    service = Service(organization_id=organization.id, **payload.model_dump())
    session.add(service)
    session.flush()

    create_default_week(session, service.id)

    session.commit()
    session.refresh(service)

    logger.info("Service created id=%s organization=%s", service.id, organization.id)
    return service


@router.get("/", response_model=List[Service])
def list_my_services(
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    services = session.exec(
        select(Service).where(Service.organization_id == organization.id)
    ).all()

    return services


@router.patch("/{service_id}", response_model=Service)
def update_service(
    service_id: int,
    payload: ServiceUpdate,
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    service = get_owned_service(session, service_id, organization.id)

    # null não apaga campo obrigatório
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(service, field, value)

    session.add(service)
    session.commit()
    session.refresh(service)
    return service


@router.delete("/{service_id}")
def delete_service(
    service_id: int,
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    service = get_owned_service(session, service_id, organization.id)

    has_appointments = session.exec(
        select(Appointment).where(Appointment.service_id == service.id)
    ).first()
    if has_appointments:
        raise HTTPException(
            status_code=400,
            detail="Serviço possui agendamentos; desative-o em vez de remover",
        )

    schedules = session.exec(select(Schedule).where(Schedule.service_id == service.id)).all()
    for schedule in schedules:
        periods = session.exec(
            select(SchedulePeriod).where(SchedulePeriod.schedule_id == schedule.id)
        ).all()
        for period in periods:
            session.delete(period)
        session.delete(schedule)

    session.delete(service)
    session.commit()

    logger.info("Service deleted id=%s organization=%s", service_id, organization.id)
    return {"message": "Serviço removido"}
