"""Fixtures compartilhadas: banco em memória, cliente da API e um dono em trial."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from schedulizer.core.security import create_access_token
from schedulizer.database import get_session
from schedulizer.main import app
from schedulizer.models.organization import Organization
from schedulizer.models.service import Service
from schedulizer.models.subscription import Subscription
from schedulizer.models.user import User
from schedulizer.routers.services import create_default_week


@pytest.fixture()
def session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def client(session):
    def _override_session():
        yield session

    app.dependency_overrides[get_session] = _override_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_owner(session: Session, email: str, slug: str, subscription_status: str = "trialing") -> User:
    owner = User(name="Owner", email=email, role="owner", password_hash="not-used")
    session.add(owner)
    session.flush()

    organization = Organization(name=f"Org {slug}", slug=slug, timezone="UTC")
    session.add(organization)
    session.flush()

    owner.organization_id = organization.id
    session.add(owner)
    session.add(
        Subscription(
            organization_id=organization.id,
            status=subscription_status,
            current_period_end=datetime.utcnow() + timedelta(days=14),
        )
    )
    session.commit()
    session.refresh(owner)
    return owner


def headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}


@pytest.fixture()
def owner(session) -> User:
    return make_owner(session, "owner@example.com", "studio-one")


@pytest.fixture()
def organization(session, owner) -> Organization:
    return session.get(Organization, owner.organization_id)


@pytest.fixture()
def auth_headers(owner) -> dict:
    return headers_for(owner)


@pytest.fixture()
def service(session, organization) -> Service:
    service = Service(
        organization_id=organization.id,
        name="Corte",
        duration_minutes=30,
        price=40.0,
    )
    session.add(service)
    session.flush()
    create_default_week(session, service.id)
    session.commit()
    session.refresh(service)
    return service
