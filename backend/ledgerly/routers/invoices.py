from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ledgerly.core.deps import get_current_user
from ledgerly.db.session import get_db
from ledgerly.models.enums import InvoiceStatus
from ledgerly.models.invoice import Invoice
from ledgerly.models.user import User
from ledgerly.repositories import user_settings as user_settings_repo
from ledgerly.schemas.common import page_meta
from ledgerly.schemas.invoice import (
    InvoiceCreate,
    InvoiceDetail,
    InvoiceItemRead,
    InvoiceListResponse,
    InvoiceRead,
    InvoiceUpdate,
    PaymentCreate,
    PaymentRead,
    PaymentRegistered,
)
from ledgerly.services import invoices as invoice_service
from ledgerly.services import payments as payment_service
from ledgerly.services.invoice_pdf import pdf_filename, render_invoice_pdf

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


def _invoice_detail(invoice: Invoice) -> InvoiceDetail:
    return InvoiceDetail(
        **InvoiceRead.model_validate(invoice).model_dump(),
        items=[InvoiceItemRead.model_validate(item) for item in invoice.items],
        payments=[PaymentRead.model_validate(payment) for payment in invoice.active_payments],
    )


@router.get("", response_model=InvoiceListResponse)
def list_invoices(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    customer_id: Optional[int] = Query(None),
    project_id: Optional[int] = Query(None),
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> InvoiceListResponse:
    rows, total = invoice_service.list_invoices(
        db,
        user_id=current_user.id,
        page=page,
        page_size=page_size,
        customer_id=customer_id,
        project_id=project_id,
        status=status_filter,
    )
    return InvoiceListResponse(
        items=[InvoiceRead.model_validate(row) for row in rows],
        **page_meta(total=total, page=page, page_size=page_size),
    )


@router.post("", response_model=InvoiceDetail, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_in: InvoiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> InvoiceDetail:
    invoice = invoice_service.create_invoice(db, user=current_user, payload=invoice_in)
    db.commit()
    return _invoice_detail(invoice)


@router.get("/{invoice_id}", response_model=InvoiceDetail)
def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> InvoiceDetail:
    invoice = invoice_service.get_invoice_or_404(db, user_id=current_user.id, invoice_id=invoice_id)
    return _invoice_detail(invoice)


@router.put("/{invoice_id}", response_model=InvoiceDetail)
def update_invoice(
    invoice_id: int,
    invoice_in: InvoiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> InvoiceDetail:
    invoice = invoice_service.update_invoice(db, user=current_user, invoice_id=invoice_id, payload=invoice_in)
    db.commit()
    return _invoice_detail(invoice)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    invoice_service.delete_invoice(db, user=current_user, invoice_id=invoice_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{invoice_id}/pdf")
def get_invoice_pdf(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    invoice = invoice_service.get_invoice_or_404(db, user_id=current_user.id, invoice_id=invoice_id)
    profile = user_settings_repo.get_settings(db, user_id=current_user.id)
    content = render_invoice_pdf(invoice=invoice, profile=profile)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(invoice)}"'},
    )


@router.get("/{invoice_id}/payments", response_model=List[PaymentRead])
def list_payments(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> List[PaymentRead]:
    payments = payment_service.list_invoice_payments(db, user_id=current_user.id, invoice_id=invoice_id)
    return [PaymentRead.model_validate(payment) for payment in payments]


@router.post("/{invoice_id}/payments", response_model=PaymentRegistered, status_code=status.HTTP_201_CREATED)
def register_payment(
    invoice_id: int,
    payment_in: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PaymentRegistered:
    payment, invoice = payment_service.register_payment(
        db,
        user=current_user,
        invoice_id=invoice_id,
        payload=payment_in,
    )
    db.commit()
    return PaymentRegistered(
        payment=PaymentRead.model_validate(payment),
        invoice_status=invoice.status,
        paid_amount=invoice.paid_amount,
        total_amount=invoice.total_amount,
    )
