from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from schedulizer.core.plans import resolve_plan_from_subscription
from schedulizer.core.security import get_current_organization
from schedulizer.database import get_session
from schedulizer.models.organization import Organization
from schedulizer.models.subscription import Subscription


router = APIRouter(prefix="/billing", tags=["billing"])


@router.get("/subscription")
def get_subscription(
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    subscription = session.exec(
        select(Subscription).where(Subscription.organization_id == organization.id)
    ).first()

    if subscription is None:
        return {"status": None, "plan": None, "limits": None, "current_period_end": None}

    plan = resolve_plan_from_subscription(subscription)

    return {
        "status": subscription.status,
        "plan": plan.type if plan else None,
        "limits": {
            "max_services": plan.limits.max_services,
            "max_members": plan.limits.max_members,
            "whatsapp_enabled": plan.limits.whatsapp_enabled,
        } if plan else None,
        "current_period_end": subscription.current_period_end,
    }
