from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from ledgerly.core.deps import get_current_user
from ledgerly.db.session import get_db
from ledgerly.models.user import User
from ledgerly.services import payments as payment_service

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payment(
    payment_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    payment_service.delete_payment(db, user=current_user, payment_id=payment_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
