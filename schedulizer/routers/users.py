from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from schedulizer.core.security import get_current_user, get_password_hash
from schedulizer.database import get_session
from schedulizer.models.user import User, UserCreate

router = APIRouter(prefix="/users", tags=["users"])


def _public(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "organization_id": user.organization_id,
    }


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_user(user: UserCreate, session: Session = Depends(get_session)):

    existing_user = session.exec(
        select(User).where(User.email == user.email)
    ).first()

    if existing_user:
        raise HTTPException(status_code=400, detail="Email já cadastrado")

    db_user = User(
        name=user.name,
        email=user.email,
        password_hash=get_password_hash(user.password),
        role=user.role,
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)

    return _public(db_user)


@router.get("/me")
def read_me(current_user: User = Depends(get_current_user)):
    return _public(current_user)
