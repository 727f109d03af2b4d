from dataclasses import dataclass
from typing import Literal, Optional

from schedulizer.config import settings


PlanType = Literal["essential", "professional"]


@dataclass(frozen=True)
class PlanLimits:
    max_services: Optional[int]  # None = ilimitado
    max_members: int
    whatsapp_enabled: bool


PLAN_LIMITS = {
    "essential": PlanLimits(max_services=5, max_members=1, whatsapp_enabled=False),
    "professional": PlanLimits(max_services=None, max_members=10, whatsapp_enabled=True),
}


@dataclass(frozen=True)
class ResolvedPlan:
    type: PlanType
    limits: PlanLimits
    stripe_price_id: str


def get_plan_limits(plan: PlanType) -> PlanLimits:
    return PLAN_LIMITS[plan]


def resolve_plan_type(stripe_price_id: Optional[str]) -> Optional[PlanType]:
    if not stripe_price_id:
        return None

    essential = {settings.stripe_price_essential_monthly, settings.stripe_price_essential_yearly}
    professional = {settings.stripe_price_professional_monthly, settings.stripe_price_professional_yearly}

    if stripe_price_id in essential:
        return "essential"
    if stripe_price_id in professional:
        return "professional"
    return None


def resolve_plan_from_subscription(subscription) -> Optional[ResolvedPlan]:
    # trial sempre libera o plano completo
    if subscription.status == "trialing":
        return ResolvedPlan(
            type="professional",
            limits=get_plan_limits("professional"),
            stripe_price_id=subscription.stripe_price_id or "",
        )

    plan_type = resolve_plan_type(subscription.stripe_price_id)
    if plan_type is None:
        return None

    return ResolvedPlan(
        type=plan_type,
        limits=get_plan_limits(plan_type),
        stripe_price_id=subscription.stripe_price_id,
    )
