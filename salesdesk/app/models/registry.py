# Import every model so relationship strings resolve and Alembic sees the
# full metadata.
from salesdesk.app.models.audit import AuditLog
from salesdesk.app.models.customer import Customer
from salesdesk.app.models.inventory import Product, ProductType
from salesdesk.app.models.invoice import (
    DiscountType,
    Invoice,
    InvoiceCounter,
    InvoiceItem,
)
from salesdesk.app.models.user import RoleEnum, User

__all__ = [
    "AuditLog",
    "Customer",
    "DiscountType",
    "Invoice",
    "InvoiceCounter",
    "InvoiceItem",
    "Product",
    "ProductType",
    "RoleEnum",
    "User",
]
