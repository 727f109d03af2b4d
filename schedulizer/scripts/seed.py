import logging
from datetime import datetime, timedelta

from sqlmodel import Session, select

from schedulizer.config import configure_logging, settings
from schedulizer.core.schedule_validation import find_schedule_conflict
from schedulizer.core.security import get_password_hash
from schedulizer.database import create_db_and_tables, engine
from schedulizer.models.organization import Organization
from schedulizer.models.schedule import Schedule, SchedulePeriod
from schedulizer.models.service import Service
from schedulizer.models.subscription import Subscription
from schedulizer.models.user import User


logger = logging.getLogger(__name__)

OWNER_EMAIL = "dono@schedulizer.dev"
OWNER_PASSWORD = "trocar-esta-senha"
ORGANIZATION_SLUG = "barbearia-demo"

# seg-sáb com almoço, domingo fechado
DEFAULT_WEEK = [
    {"day_of_week": 0, "is_active": False, "periods": []},
] + [
    {
        "day_of_week": day,
        "is_active": True,
        "periods": [
            {"start_time": "08:00", "end_time": "12:00"},
            {"start_time": "13:00", "end_time": "18:00"},
        ],
    }
    for day in range(1, 7)
]


def _get_or_create_owner(session: Session) -> User:
    owner = session.exec(select(User).where(User.email == OWNER_EMAIL)).first()
    if owner:
        return owner

    owner = User(
        name="Dono Demo",
        email=OWNER_EMAIL,
        role="owner",
        password_hash=get_password_hash(OWNER_PASSWORD),
    )
    session.add(owner)
    session.flush()
    return owner


def _get_or_create_organization(session: Session, owner: User) -> Organization:
    organization = session.exec(
        select(Organization).where(Organization.slug == ORGANIZATION_SLUG)
    ).first()
    if organization:
        return organization

    organization = Organization(name="Barbearia Demo", slug=ORGANIZATION_SLUG)
    session.add(organization)
    session.flush()

    owner.organization_id = organization.id
    session.add(owner)
    session.add(
        Subscription(
            organization_id=organization.id,
            status="trialing",
            current_period_end=datetime.utcnow() + timedelta(days=settings.trial_days),
        )
    )
    return organization


def _write_week(session: Session, service: Service) -> None:
    conflict = find_schedule_conflict(DEFAULT_WEEK)
    if conflict:
        raise RuntimeError(conflict.message)

    for cfg in DEFAULT_WEEK:
        schedule = Schedule(
            service_id=service.id,
            day_of_week=cfg["day_of_week"],
            is_active=cfg["is_active"],
        )
        session.add(schedule)
        session.flush()
        for period in cfg["periods"]:
            session.add(SchedulePeriod(schedule_id=schedule.id, **period))


def main():
    configure_logging()
    create_db_and_tables()

    with Session(engine) as session:
        owner = _get_or_create_owner(session)
        organization = _get_or_create_organization(session, owner)

        existing_service = session.exec(
            select(Service).where(Service.organization_id == organization.id)
        ).first()

        if not existing_service:
            for name, duration, price in [
                ("Corte", 30, 40.0),
                ("Barba", 20, 30.0),
                ("Corte + Barba", 50, 65.0),
            ]:
                service = Service(
                    organization_id=organization.id,
                    name=name,
                    duration_minutes=duration,
                    price=price,
                )
                session.add(service)
                session.flush()
                _write_week(session, service)

        session.commit()

        logger.info("Seed concluído: owner=%s organization=%s", owner.email, organization.slug)


if __name__ == "__main__":
    main()
