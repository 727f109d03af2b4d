import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from schedulizer.config import settings
from schedulizer.core.security import get_current_organization, get_current_owner
from schedulizer.database import get_session
from schedulizer.models.organization import Organization, OrganizationCreate, OrganizationUpdate
from schedulizer.models.subscription import Subscription
from schedulizer.models.user import User


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=Organization)
def create_organization(
    payload: OrganizationCreate,
    session: Session = Depends(get_session),
    current_owner: User = Depends(get_current_owner),
):
    if current_owner.organization_id is not None:
        raise HTTPException(status_code=400, detail="Usuário já possui organização")

    slug_taken = session.exec(
        select(Organization).where(Organization.slug == payload.slug)
    ).first()
    if slug_taken:
        raise HTTPException(status_code=400, detail="Slug já está em uso")

    organization = Organization(**payload.model_dump())
    session.add(organization)
    session.flush()

    current_owner.organization_id = organization.id
    session.add(current_owner)

    # toda organização nova começa em trial
    session.add(
        Subscription(
            organization_id=organization.id,
            status="trialing",
            current_period_end=datetime.utcnow() + timedelta(days=settings.trial_days),
        )
    )

    session.commit()
    session.refresh(organization)

    logger.info("Organization created id=%s slug=%s", organization.id, organization.slug)
    return organization


@router.get("/me", response_model=Organization)
def get_my_organization(
    organization: Organization = Depends(get_current_organization),
):
    return organization


@router.patch("/me", response_model=Organization)
def update_my_organization(
    payload: OrganizationUpdate,
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(organization, field, value)

    session.add(organization)
    session.commit()
    session.refresh(organization)
    return organization
