import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlmodel import Session, select

from schedulizer.config import settings
from schedulizer.core.plans import ResolvedPlan, resolve_plan_from_subscription
from schedulizer.database import get_session
from schedulizer.models.organization import Organization
from schedulizer.models.subscription import Subscription
from schedulizer.models.user import User


logger = logging.getLogger(__name__)

VALID_SUBSCRIPTION_STATUSES = ("active", "trialing")


# =========================
# HASH DE SENHA
# =========================

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


# =========================
# TOKEN JWT
# =========================

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


# =========================
# USUÁRIO AUTENTICADO
# =========================

def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> User:

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Não foi possível validar as credenciais",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        email: str = payload.get("sub")

        if email is None:
            raise credentials_exception

    except JWTError:
        raise credentials_exception

    user = session.exec(
        select(User).where(User.email == email)
    ).first()

    if user is None:
        raise credentials_exception

    return user


# =========================
# SOMENTE DONO
# =========================

def get_current_owner(
    current_user: User = Depends(get_current_user),
) -> User:

    if current_user.role != "owner":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Apenas donos de organização podem acessar esta rota"
        )

    return current_user


def get_current_organization(
    current_owner: User = Depends(get_current_owner),
    session: Session = Depends(get_session),
) -> Organization:

    organization = None
    if current_owner.organization_id is not None:
        organization = session.get(Organization, current_owner.organization_id)

    if organization is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Nenhuma organização ativa",
        )

    return organization


# =========================
# ASSINATURA ATIVA
# =========================

def require_subscription(
    organization: Organization = Depends(get_current_organization),
    session: Session = Depends(get_session),
) -> ResolvedPlan:

    subscription = session.exec(
        select(Subscription).where(Subscription.organization_id == organization.id)
    ).first()

    if subscription is None:
        raise HTTPException(status_code=403, detail="Nenhuma assinatura ativa")

    if subscription.status not in VALID_SUBSCRIPTION_STATUSES:
        raise HTTPException(status_code=403, detail="Assinatura inativa")

    if subscription.current_period_end is None or datetime.utcnow() > subscription.current_period_end:
        raise HTTPException(status_code=403, detail="Assinatura expirada")

    plan = resolve_plan_from_subscription(subscription)
    if plan is None:
        logger.warning(
            "Plano não reconhecido para organização %s (price=%s)",
            organization.id,
            subscription.stripe_price_id,
        )
        raise HTTPException(status_code=403, detail="Plano inválido")

    return plan
