"""Pydantic schemas for the marketplace service.

The storefront speaks camelCase JSON; every schema accepts snake_case too.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from libs.common.currency import Currency
from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel
from services.marketplace_service.models import (
    ApplicationStatus,
    OrderStatus,
    PaymentMethod,
    UserRole,
)


class APIModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class TrimmedInput(APIModel):
    """Request body whose strings are stripped before length checks."""

    model_config = ConfigDict(str_strip_whitespace=True)


# ============================================================================
# AUTH SCHEMAS
# ============================================================================


class RegisterRequest(APIModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class LoginRequest(APIModel):
    email: EmailStr
    password: str


class UserResponse(APIModel):
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole
    created_at: datetime


class AuthResponse(APIModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    vendor_id: Optional[uuid.UUID] = None


# ============================================================================
# CATALOG SCHEMAS
# ============================================================================


class CategoryCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    icon: str = Field(..., max_length=50)


class CategoryResponse(CategoryCreate):
    id: uuid.UUID


class ProductCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(0, ge=0)
    image_url: str = Field(..., max_length=1000)
    category_id: uuid.UUID
    # Admins only: create on behalf of a vendor
    vendor_id: Optional[uuid.UUID] = None


class ProductUpdate(APIModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=1000)
    category_id: Optional[uuid.UUID] = None
    is_active: Optional[bool] = None


class ProductResponse(APIModel):
    id: uuid.UUID
    vendor_id: uuid.UUID
    category_id: uuid.UUID
    name: str
    description: str
    price: Decimal
    stock: int
    image_url: str
    is_active: bool
    created_at: datetime


# ============================================================================
# VENDOR SCHEMAS
# ============================================================================


class VendorApplicationCreate(APIModel):
    store_name: str = Field(..., max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None


class VendorApplicationResponse(APIModel):
    id: uuid.UUID
    store_name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    status: ApplicationStatus
    user_id: Optional[uuid.UUID] = None
    vendor_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime


class ApplicationSubmitResponse(APIModel):
    id: uuid.UUID
    status: ApplicationStatus
    created: bool


class ApplicationDecisionResponse(APIModel):
    application: VendorApplicationResponse
    vendor_id: Optional[uuid.UUID] = None
    user_id: Optional[uuid.UUID] = None
    promoted: bool = False


class VendorResponse(APIModel):
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    store_name: str
    description: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_approved: bool
    status: str
    created_at: Optional[datetime] = None


class ApprovalUpdate(APIModel):
    """Approval toggle in any of the shapes older clients send.

    ``{"isApproved": bool}``, ``{"approved": bool}`` or
    ``{"status": "approved" | "rejected" | "pending" | "disabled"}``.
    """

    is_approved: Optional[bool] = None
    approved: Optional[bool] = None
    status: Optional[Literal["approved", "rejected", "pending", "disabled"]] = None

    @model_validator(mode="after")
    def _require_one(self):
        if self.is_approved is None and self.approved is None and self.status is None:
            raise ValueError("Provide isApproved, approved or status")
        return self

    @property
    def value(self) -> bool:
        if self.is_approved is not None:
            return self.is_approved
        if self.approved is not None:
            return self.approved
        return self.status == "approved"


class AdminVendorUpdate(APIModel):
    """``PATCH /api/admin/vendors/{id}`` body: ``{isApproved}`` or ``{action}``."""

    is_approved: Optional[bool] = None
    action: Optional[Literal["approve", "reject", "disable"]] = None

    @model_validator(mode="after")
    def _require_one(self):
        if self.is_approved is None and self.action is None:
            raise ValueError("Provide isApproved or action")
        return self


class VendorDeleteResponse(APIModel):
    ok: bool = True
    vendor_id: uuid.UUID
    hard: bool
    soft_deleted: bool


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class ShippingAddress(TrimmedInput):
    line1: str = Field(..., min_length=1)
    line2: Optional[str] = None
    city: str = Field(..., min_length=1)
    region: Optional[str] = None
    country: str = Field(..., min_length=1)


class CheckoutItem(APIModel):
    product_id: uuid.UUID
    quantity: int = Field(..., gt=0)


class CheckoutRequest(TrimmedInput):
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: EmailStr
    customer_phone: Optional[str] = Field(None, max_length=50)
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    items: list[CheckoutItem] = Field(..., min_length=1)
    currency: Optional[Currency] = None
    rate: Optional[Decimal] = Field(None, gt=0)
    notes: Optional[str] = None


class OrderItemResponse(APIModel):
    id: uuid.UUID
    product_id: uuid.UUID
    vendor_id: uuid.UUID
    name: str
    image_url: Optional[str] = None
    price: Decimal
    quantity: int


class OrderResponse(APIModel):
    id: uuid.UUID
    reference: str
    vendor_id: uuid.UUID
    customer_id: Optional[uuid.UUID] = None
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    currency: str
    rate: Decimal
    subtotal: Decimal
    shipping_fee: Decimal
    total: Decimal
    payment_method: str
    notes: Optional[str] = None
    shipping_address: dict
    status: OrderStatus
    created_at: datetime
    items: list[OrderItemResponse] = []


class CheckoutResponse(APIModel):
    ok: bool = True
    order_id: uuid.UUID
    orders: list[OrderResponse]


class OrderStatusUpdate(APIModel):
    status: OrderStatus


class OrderNotesUpdate(APIModel):
    notes: Optional[str] = None


# ============================================================================
# ADMIN / DISPLAY SCHEMAS
# ============================================================================


class AdminStats(APIModel):
    total_vendors: int
    approved_vendors: int
    pending_vendors: int
    pending_applications: int
    total_customers: int
    active_products: int
    total_orders: int
    orders_today: int
    revenue: dict[str, Decimal]


class CurrencyConfig(APIModel):
    default_currency: Currency
    rate: Decimal
    currencies: list[Currency]


class SupportInfo(APIModel):
    email: str
    phone: Optional[str] = None
    mailto: str
    whatsapp_url: Optional[str] = None
