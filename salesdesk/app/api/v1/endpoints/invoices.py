from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from salesdesk.app.api.deps import get_current_user
from salesdesk.app.api.permission_deps import require_staff
from salesdesk.app.core.database import get_db
from salesdesk.app.models.user import User
from salesdesk.app.schemas.invoice import InvoiceCreate, InvoiceDetailOut, InvoiceOut
from salesdesk.app.services.sales import create_invoice, list_invoices

router = APIRouter()


@router.post("/", response_model=InvoiceOut, status_code=status.HTTP_201_CREATED)
def create(
    payload: InvoiceCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> InvoiceOut:
    invoice = create_invoice(
        db,
        customer_id=payload.customer,
        items=payload.items,
        discount=payload.discount,
        created_by=current_user,
        ip_address=request.client.host if request.client else None,
    )
    return InvoiceOut.from_invoice(invoice)


@router.get("/", response_model=list[InvoiceDetailOut])
def index(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[InvoiceDetailOut]:
    return [InvoiceDetailOut.from_invoice(inv) for inv in list_invoices(db, current_user)]
