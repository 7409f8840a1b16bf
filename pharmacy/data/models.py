import enum
import random
from datetime import datetime

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship

from .database import Base


class StockCategory(str, enum.Enum):
    tablets = "Tablets"
    capsules = "Capsules"
    syrups = "Syrups"
    injections = "Injections"
    creams = "Creams"
    ointments = "Ointments"
    essentials = "Essentials"

class PaymentType(str, enum.Enum):
    cash = "Cash"
    card = "Card"
    online = "Online"

class PurchasePaymentType(str, enum.Enum):
    cash_payment = "Cash Payment"
    upi = "UPI"
    net_banking = "Net Banking"
    cards = "Cards"
    payment_due = "Payment Due"


def generate_invoice_number() -> str:
    return f"INV-{random.randint(100000, 999999)}"


class Stock(Base):
    __tablename__ = "stock"

    id = Column(Integer, primary_key=True, index=True)
    product_name = Column(String, index=True, nullable=False)
    batch_id = Column(String, nullable=False)
    mrp = Column(Float, nullable=False)
    rate = Column(Float, nullable=False)
    gst = Column(Float, nullable=False, default=0)
    packing = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    expiry_date = Column(DateTime, nullable=False)
    supplier_name = Column(String, nullable=False)
    generic_name = Column(String, nullable=False)
    category = Column(Enum(StockCategory, values_callable=lambda e: [m.value for m in e]), nullable=False)
    rack_number = Column(String, nullable=False, default="Rack-1")
    shelf_number = Column(String, nullable=False, default="Shelf-1")
    discount = Column(Float, default=0)  # percentage 0-100
    discounted_price = Column(Float, default=0)

class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    customer_name = Column(String, nullable=False)
    customer_contact = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, default="")
    loyalty_points = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String, unique=True, index=True, nullable=False, default=generate_invoice_number)
    date = Column(DateTime, nullable=False, default=datetime.now, index=True)
    customer_name = Column(String, nullable=False)
    customer_contact = Column(String, nullable=False, index=True)
    customer_email = Column(String, nullable=True)
    subtotal = Column(Float, nullable=False)
    total_discount = Column(Float, nullable=False, default=0)
    gst_total = Column(Float, nullable=False)
    total_amount = Column(Float, nullable=False)
    payment_type = Column(Enum(PaymentType, values_callable=lambda e: [m.value for m in e]), nullable=False, default=PaymentType.cash)
    created_at = Column(DateTime, default=datetime.now, index=True)

    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")

class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)
    product_name = Column(String, nullable=False)
    batch_id = Column(String, nullable=False)
    mrp = Column(Float, nullable=False)
    gst = Column(Float, nullable=False, default=0)
    packing = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    expiry_date = Column(DateTime, nullable=False)
    discount = Column(Float, default=0)
    total = Column(Float, nullable=False)

    sale = relationship("Sale", back_populates="items")

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    product_name = Column(String, index=True, nullable=False)
    generic_name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    purpose = Column(String, nullable=False)
    gst = Column(Float, nullable=False, default=0)

class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    supplier_name = Column(String, nullable=False)
    contact_number = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, nullable=False)
    organisation = Column(String, nullable=False)

class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    supplier_name = Column(String, nullable=False)
    invoice_number = Column(String, nullable=False)
    date = Column(DateTime, default=datetime.now)
    payment_type = Column(Enum(PurchasePaymentType, values_callable=lambda e: [m.value for m in e]), nullable=False)
    grand_total = Column(Float, nullable=False)

    products = relationship("PurchaseItem", back_populates="purchase", cascade="all, delete-orphan")

class PurchaseItem(Base):
    __tablename__ = "purchase_items"

    id = Column(Integer, primary_key=True, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=False)
    product_name = Column(String, nullable=False)
    generic_name = Column(String, nullable=False)
    batch_id = Column(String, nullable=False)
    category = Column(Enum(StockCategory, values_callable=lambda e: [m.value for m in e]), nullable=False)
    mrp = Column(Float, nullable=False)
    packing = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    rate = Column(Float, nullable=False)
    gst = Column(Float, nullable=False, default=0)
    amount = Column(Float, nullable=False)  # rate * quantity + gst
    expiry_date = Column(DateTime, nullable=False)

    purchase = relationship("Purchase", back_populates="products")
