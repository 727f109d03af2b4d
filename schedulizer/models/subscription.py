from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field


class Subscription(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    organization_id: int = Field(foreign_key="organization.id", index=True, unique=True)

    stripe_subscription_id: Optional[str] = None
    stripe_price_id: Optional[str] = None

    status: str = Field(default="trialing", index=True)
    # trialing | active | past_due | canceled | incomplete

    current_period_end: Optional[datetime] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
