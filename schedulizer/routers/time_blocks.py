from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session, select

from schedulizer.core.security import get_current_organization, require_subscription
from schedulizer.database import get_session
from schedulizer.models.organization import Organization
from schedulizer.models.time_block import TimeBlock, TimeBlockCreate

router = APIRouter(
    prefix="/time-blocks",
    tags=["time-blocks"],
    dependencies=[Depends(require_subscription)],
)


@router.get("/", response_model=List[TimeBlock])
def list_time_blocks(
    from_day: date = Query(alias="from"),
    to_day: date = Query(alias="to"),
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    if to_day < from_day:
        raise HTTPException(status_code=400, detail="'to' deve ser maior ou igual a 'from'")

    return session.exec(
        select(TimeBlock)
        .where(
            TimeBlock.organization_id == organization.id,
            TimeBlock.day >= from_day,
            TimeBlock.day <= to_day,
        )
        .order_by(TimeBlock.day, TimeBlock.start_time)
    ).all()


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=TimeBlock)
def create_time_block(
    payload: TimeBlockCreate,
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    # força ownership
    block = TimeBlock(organization_id=organization.id, **payload.model_dump())

    session.add(block)
    session.commit()
    session.refresh(block)
    return block


@router.delete("/{block_id}")
def delete_time_block(
    block_id: int,
    session: Session = Depends(get_session),
    organization: Organization = Depends(get_current_organization),
):
    block = session.get(TimeBlock, block_id)
    if not block:
        raise HTTPException(status_code=404, detail="Bloqueio não encontrado")

    if block.organization_id != organization.id:
        raise HTTPException(status_code=403, detail="Sem permissão")

    session.delete(block)
    session.commit()
    return {"message": "Bloqueio removido"}
