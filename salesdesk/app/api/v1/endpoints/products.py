from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload

from salesdesk.app.api.deps import get_current_user
from salesdesk.app.api.permission_deps import require_admin
from salesdesk.app.core.database import get_db
from salesdesk.app.core.exceptions import InvalidReference, NotFound
from salesdesk.app.models.inventory import Product, ProductType
from salesdesk.app.models.user import User
from salesdesk.app.schemas.common import MessageOut
from salesdesk.app.schemas.inventory import ProductCreate, ProductOut, ProductUpdate

router = APIRouter()


def _get_or_404(db: Session, product_id: UUID) -> Product:
    product = (
        db.query(Product)
        .options(joinedload(Product.product_type))
        .filter(Product.id == product_id)
        .first()
    )
    if not product:
        raise NotFound()
    return product


def _require_type(db: Session, type_id: UUID) -> None:
    if not db.query(ProductType.id).filter(ProductType.id == type_id).first():
        raise InvalidReference("product type", type_id)


@router.get("/", response_model=list[ProductOut])
def list_products(
    type: UUID | None = Query(None, description="Only products of this type"),
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
) -> list[Product]:
    query = db.query(Product).options(joinedload(Product.product_type))
    if type is not None:
        query = query.filter(Product.type_id == type)
    return query.order_by(Product.name).all()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: UUID,
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
) -> Product:
    return _get_or_404(db, product_id)


@router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
) -> Product:
    _require_type(db, payload.type)
    product = Product(
        name=payload.name,
        price=payload.price,
        unit=payload.unit,
        type_id=payload.type,
        stock=payload.stock,
        created_by=current_user.id,
    )
    db.add(product)
    db.commit()
    return _get_or_404(db, product.id)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: UUID,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Product:
    product = _get_or_404(db, product_id)
    updates = payload.model_dump(exclude_unset=True)

    type_id = updates.pop("type", None)
    if type_id is not None:
        _require_type(db, type_id)
        product.type_id = type_id

    for field, value in updates.items():
        # stock may be cleared to switch tracking off; the rest are required
        if value is None and field != "stock":
            continue
        setattr(product, field, value)
    db.commit()
    db.expire(product)
    return _get_or_404(db, product_id)


@router.delete("/{product_id}", response_model=MessageOut)
def delete_product(
    product_id: UUID,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> dict[str, str]:
    product = _get_or_404(db, product_id)
    db.delete(product)
    db.commit()
    return {"message": "Deleted"}
