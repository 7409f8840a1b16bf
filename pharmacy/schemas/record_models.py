"""Record-keeping pydantic models with stricter types.

- Enums for category and payment types reject invalid values at the edge.
- Dates are datetime so ISO strings are parsed.
- ``*Out`` models read straight from ORM rows (``from_attributes``).
"""
from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .io_models import CamelModel
from ..data.models import PaymentType, PurchasePaymentType, StockCategory


class OrmModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Stock

class StockIn(CamelModel):
    product_name: str
    batch_id: str
    mrp: float = Field(gt=0)
    rate: float = Field(ge=0)
    gst: float = Field(default=0, ge=0)
    packing: str
    quantity: int = Field(ge=0)
    expiry_date: datetime
    supplier_name: str = ""
    generic_name: str
    category: StockCategory
    rack_number: str = "Rack-1"
    shelf_number: str = "Shelf-1"

class StockUpdate(CamelModel):
    product_name: Optional[str] = None
    mrp: Optional[float] = Field(default=None, gt=0)
    rate: Optional[float] = Field(default=None, ge=0)
    gst: Optional[float] = Field(default=None, ge=0)
    packing: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    expiry_date: Optional[datetime] = None
    rack_number: Optional[str] = None
    shelf_number: Optional[str] = None

class AddStockRequest(CamelModel):
    supplier_name: str
    products: List[StockIn]

class StockOut(OrmModel):
    id: int
    product_name: str
    batch_id: str
    mrp: float
    rate: float
    gst: float
    packing: str
    quantity: int
    expiry_date: datetime
    supplier_name: str
    generic_name: str
    category: StockCategory
    rack_number: str
    shelf_number: str
    discount: float = 0
    discounted_price: float = 0
    days_until_expiry: Optional[int] = None
    months_until_expiry: Optional[float] = None


# Customers

class CustomerIn(CamelModel):
    customer_name: str
    customer_contact: str = Field(min_length=3)
    email: Optional[str] = ""
    loyalty_points: int = Field(default=0, ge=0)

class CustomerOut(OrmModel):
    id: int
    customer_name: str
    customer_contact: str
    email: Optional[str] = ""
    loyalty_points: int
    created_at: Optional[datetime] = None

class LoyaltyUpdate(CamelModel):
    loyalty_points: int

class RedeemRequest(CamelModel):
    points_to_redeem: int


# Sales

class SaleCustomer(CamelModel):
    name: str
    contact: str
    email: Optional[str] = None

class SaleItemIn(CamelModel):
    product_name: str
    batch_id: str
    quantity: int = Field(gt=0)
    mrp: float = Field(gt=0)
    gst: float = Field(default=0, ge=0)
    discount: float = Field(default=0, ge=0)

class SaleIn(CamelModel):
    customer: SaleCustomer
    items: List[SaleItemIn] = Field(min_length=1)
    payment_type: PaymentType = PaymentType.cash
    total_discount: float = Field(default=0, ge=0)
    redeemed_points: int = Field(default=0, ge=0)

class SaleItemOut(OrmModel):
    product_name: str
    batch_id: str
    mrp: float
    gst: float
    packing: str
    quantity: int
    expiry_date: datetime
    discount: float
    total: float

class SaleOut(OrmModel):
    id: int
    invoice_number: str
    date: datetime
    customer_name: str
    customer_contact: str
    customer_email: Optional[str] = None
    items: List[SaleItemOut]
    subtotal: float
    total_discount: float
    gst_total: float
    total_amount: float
    payment_type: PaymentType
    created_at: Optional[datetime] = None


# Products

class ProductIn(CamelModel):
    product_name: str
    generic_name: str
    category: str
    purpose: str
    gst: float = Field(default=0, ge=0)

class ProductOut(OrmModel):
    id: int
    product_name: str
    generic_name: str
    category: str
    purpose: str
    gst: float


# Suppliers

class SupplierIn(CamelModel):
    supplier_name: str
    contact_number: str
    email: str
    organisation: str

    @field_validator("contact_number")
    @classmethod
    def phone_digits(cls, v: str) -> str:
        v = v.strip()
        if not v.isdigit() or not 10 <= len(v) <= 15:
            raise ValueError("Contact number must be 10 to 15 digits")
        return v

class SupplierOut(OrmModel):
    id: int
    supplier_name: str
    contact_number: str
    email: str
    organisation: str


# Purchases

class PurchaseItemIn(CamelModel):
    product_name: str
    generic_name: str
    batch_id: str
    category: StockCategory
    mrp: float = Field(gt=0)
    packing: str
    quantity: int = Field(gt=0)
    rate: float = Field(ge=0)
    gst: float = Field(default=0, ge=0)
    expiry_date: datetime

class PurchaseIn(CamelModel):
    supplier_name: str
    invoice_number: str
    date: Optional[datetime] = None
    payment_type: PurchasePaymentType
    products: List[PurchaseItemIn] = Field(min_length=1)

class PurchaseItemOut(OrmModel):
    product_name: str
    generic_name: str
    batch_id: str
    category: StockCategory
    mrp: float
    packing: str
    quantity: int
    rate: float
    gst: float
    amount: float
    expiry_date: datetime

class PurchaseOut(OrmModel):
    id: int
    supplier_name: str
    invoice_number: str
    date: datetime
    payment_type: PurchasePaymentType
    products: List[PurchaseItemOut]
    grand_total: float
