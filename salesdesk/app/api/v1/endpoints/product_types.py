from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salesdesk.app.api.deps import get_current_user
from salesdesk.app.api.permission_deps import require_admin
from salesdesk.app.core.database import get_db
from salesdesk.app.core.exceptions import DuplicateKey, NotFound, SalesError
from salesdesk.app.models.inventory import ProductType
from salesdesk.app.models.user import User
from salesdesk.app.schemas.common import MessageOut
from salesdesk.app.schemas.inventory import (
    ProductTypeCreate,
    ProductTypeOut,
    ProductTypeUpdate,
)

router = APIRouter()


def _commit_unique_name(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateKey("Product Type already exists") from exc


@router.get("/", response_model=list[ProductTypeOut])
def list_product_types(
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
) -> list[ProductType]:
    return db.query(ProductType).order_by(ProductType.name).all()


@router.post("/", response_model=ProductTypeOut, status_code=status.HTTP_201_CREATED)
def create_product_type(
    payload: ProductTypeCreate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> ProductType:
    product_type = ProductType(name=payload.name, description=payload.description)
    db.add(product_type)
    _commit_unique_name(db)
    db.refresh(product_type)
    return product_type


@router.put("/{type_id}", response_model=ProductTypeOut)
def update_product_type(
    type_id: UUID,
    payload: ProductTypeUpdate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> ProductType:
    product_type = db.query(ProductType).filter(ProductType.id == type_id).first()
    if not product_type:
        raise NotFound()
    if payload.name is not None:
        product_type.name = payload.name
    if "description" in payload.model_fields_set:
        product_type.description = payload.description
    _commit_unique_name(db)
    db.refresh(product_type)
    return product_type


@router.delete("/{type_id}", response_model=MessageOut)
def delete_product_type(
    type_id: UUID,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> dict[str, str]:
    product_type = db.query(ProductType).filter(ProductType.id == type_id).first()
    if not product_type:
        raise NotFound()
    if product_type.products:
        raise SalesError("Product Type is still used by products")
    db.delete(product_type)
    db.commit()
    return {"message": "Deleted"}
