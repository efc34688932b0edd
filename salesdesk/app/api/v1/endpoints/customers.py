from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salesdesk.app.api.deps import get_current_user
from salesdesk.app.api.permission_deps import require_admin, require_staff
from salesdesk.app.core.database import get_db
from salesdesk.app.core.exceptions import DuplicateKey, NotFound, SalesError
from salesdesk.app.models.customer import Customer
from salesdesk.app.models.user import User
from salesdesk.app.schemas.common import MessageOut
from salesdesk.app.schemas.customer import CustomerCreate, CustomerOut, CustomerUpdate

router = APIRouter()


def _get_or_404(db: Session, customer_id: UUID) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise NotFound()
    return customer


def _commit_unique_phone(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateKey("Phone must be unique") from exc


@router.get("/", response_model=list[CustomerOut])
def list_customers(
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
) -> list[Customer]:
    return db.query(Customer).order_by(Customer.created_at.desc()).all()


@router.post("/", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
) -> Customer:
    customer = Customer(**payload.model_dump(), created_by=current_user.id)
    db.add(customer)
    _commit_unique_phone(db)
    db.refresh(customer)
    return customer


@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(
    customer_id: UUID,
    payload: CustomerUpdate,
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_staff),
) -> Customer:
    customer = _get_or_404(db, customer_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        if field in ("name", "phone") and value is None:
            continue
        setattr(customer, field, value)
    _commit_unique_phone(db)
    db.refresh(customer)
    return customer


@router.delete("/{customer_id}", response_model=MessageOut)
def delete_customer(
    customer_id: UUID,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> dict[str, str]:
    customer = _get_or_404(db, customer_id)
    db.delete(customer)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise SalesError("Customer is referenced by existing invoices") from exc
    return {"message": "Deleted"}
