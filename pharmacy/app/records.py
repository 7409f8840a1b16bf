"""Record-keeping routes: stock, customers, sales, purchases, products and suppliers.

Every handler takes a request-scoped session from ``get_db``. Client mistakes
raise ``HTTPException(400/404)``; main.py turns those into
``{"success": false, "message": ...}`` bodies.
"""
import calendar
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from .config import Config
from ..data.database import get_db
from ..data.models import Customer, Product, Purchase, PurchaseItem, Sale, SaleItem, Stock, Supplier
from ..schemas.record_models import (
    AddStockRequest, CustomerIn, CustomerOut, LoyaltyUpdate, ProductIn, ProductOut, PurchaseIn,
    PurchaseOut, RedeemRequest, SaleIn, SaleOut, StockOut, StockUpdate, SupplierIn, SupplierOut,
)
from ..utils.logger import get_logger

logger = get_logger("records")

stocks = APIRouter(prefix="/api/stocks", tags=["stocks"])
customers = APIRouter(prefix="/api/customers", tags=["customers"])
sales = APIRouter(prefix="/api/sales", tags=["sales"])
purchases = APIRouter(prefix="/api/purchases", tags=["purchases"])
products = APIRouter(prefix="/api/products", tags=["products"])
suppliers = APIRouter(prefix="/api/suppliers", tags=["suppliers"])

ROUTERS = (stocks, customers, sales, purchases, products, suppliers)


def _dump(model, row) -> Dict[str, Any]:
    return model.model_validate(row).model_dump(by_alias=True, mode="json")

def _get_or_404(db: Session, model, record_id: int, label: str):
    row = db.get(model, record_id)
    if row is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return row


# Stock

def add_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year, month = value.year + month_index // 12, month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def near_expiry_discount(expiry: datetime, mrp: float, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Flat percentage off MRP for stock expiring within the configured months, not yet expired."""
    now = now or datetime.now()
    horizon = add_months(now, Config.NEAR_EXPIRY_DISCOUNT_MONTHS)
    if now < expiry <= horizon:
        days = math.ceil((expiry - now).total_seconds() / 86400)
        percent = Config.NEAR_EXPIRY_DISCOUNT_PERCENT
        return {
            "discount": percent,
            "discounted_price": round(mrp - mrp * percent / 100, 2),
            "days_until_expiry": days,
            "months_until_expiry": round(days / 30, 1),
        }
    return {"discount": 0, "discounted_price": mrp, "days_until_expiry": None, "months_until_expiry": None}


def _stock_with_discount(item: Stock, now: Optional[datetime] = None) -> Dict[str, Any]:
    out = StockOut.model_validate(item).model_copy(update=near_expiry_discount(item.expiry_date, item.mrp, now))
    return out.model_dump(by_alias=True, mode="json")


@stocks.get("/")
def list_stock(db: Session = Depends(get_db)):
    now = datetime.now()
    return {"success": True, "data": [_stock_with_discount(s, now) for s in db.query(Stock).all()]}


@stocks.post("/add-stock")
def add_stock(body: AddStockRequest, db: Session = Depends(get_db)):
    touched: List[Stock] = []
    for product in body.products:
        existing = (db.query(Stock)
                    .filter(Stock.product_name == product.product_name, Stock.batch_id == product.batch_id)
                    .first())
        if existing:
            existing.quantity += product.quantity
            touched.append(existing)
        else:
            item = Stock(**{**product.model_dump(), "supplier_name": body.supplier_name})
            db.add(item)
            touched.append(item)
    db.commit()
    for item in touched:
        db.refresh(item)
    logger.info(f"[RECORDS] Added/merged {len(touched)} stock rows from {body.supplier_name}")
    return {"success": True, "message": "Stock added successfully", "data": [_dump(StockOut, s) for s in touched]}


@stocks.put("/{stock_id}")
def update_stock(stock_id: int, body: StockUpdate, db: Session = Depends(get_db)):
    item = _get_or_404(db, Stock, stock_id, "Stock item")
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(item, field, value)
    db.commit()
    db.refresh(item)
    return {"success": True, "message": "Stock updated successfully", "data": _dump(StockOut, item)}


@stocks.delete("/{stock_id}")
def delete_stock(stock_id: int, db: Session = Depends(get_db)):
    db.delete(_get_or_404(db, Stock, stock_id, "Stock item"))
    db.commit()
    return {"success": True, "message": "Stock deleted successfully"}


@stocks.get("/rack-management")
def rack_management(db: Session = Depends(get_db)):
    now = datetime.now()
    items = db.query(Stock).order_by(Stock.rack_number, Stock.shelf_number, Stock.product_name).all()
    locations: Dict[str, Dict[str, Any]] = {}
    for item in items:
        key = f"{item.rack_number}-{item.shelf_number}"
        slot = locations.setdefault(key, {"rackNumber": item.rack_number, "shelfNumber": item.shelf_number, "items": []})
        slot["items"].append(_stock_with_discount(item, now))

    rack_groups: Dict[str, List[Dict[str, Any]]] = {}
    for key in sorted(locations):
        rack_groups.setdefault(locations[key]["rackNumber"], []).append(locations[key])
    return {"success": True, "data": {
        "rackGroups": rack_groups,
        "locations": sorted(locations),
        "totalRacks": len(rack_groups),
        "totalShelves": len(locations),
        "totalItems": len(items),
    }}


@stocks.post("/update-discounts")
def update_discounts(db: Session = Depends(get_db)):
    now = datetime.now()
    items = db.query(Stock).all()
    for item in items:
        info = near_expiry_discount(item.expiry_date, item.mrp, now)
        item.discount = info["discount"]
        item.discounted_price = info["discounted_price"]
    db.commit()
    return {"success": True, "message": f"Updated discount information for {len(items)} stock items",
            "updatedCount": len(items)}


# Customers

@customers.get("/")
def list_customers(db: Session = Depends(get_db)):
    rows = db.query(Customer).order_by(Customer.created_at.desc(), Customer.id.desc()).all()
    return {"success": True, "data": [_dump(CustomerOut, c) for c in rows]}


@customers.post("/add", status_code=201)
def add_customer(body: CustomerIn, db: Session = Depends(get_db)):
    if db.query(Customer).filter(Customer.customer_contact == body.customer_contact).first():
        raise HTTPException(status_code=400, detail="Customer with this contact already exists")
    customer = Customer(**body.model_dump())
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return {"success": True, "message": "Customer added successfully!", "data": _dump(CustomerOut, customer)}


@customers.get("/search")
def search_customers(contact: str = Query(default=""), db: Session = Depends(get_db)):
    if len(contact) < 3:
        raise HTTPException(status_code=400, detail="Please provide at least 3 characters to search")
    rows = db.query(Customer).filter(Customer.customer_contact.contains(contact)).limit(10).all()
    return {"success": True, "data": [_dump(CustomerOut, c) for c in rows]}


@customers.put("/{customer_id}")
def update_customer(customer_id: int, body: CustomerIn, db: Session = Depends(get_db)):
    customer = _get_or_404(db, Customer, customer_id, "Customer")
    for field, value in body.model_dump().items():
        setattr(customer, field, value)
    db.commit()
    db.refresh(customer)
    return {"success": True, "data": _dump(CustomerOut, customer)}


@customers.delete("/{customer_id}")
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    db.delete(_get_or_404(db, Customer, customer_id, "Customer"))
    db.commit()
    return {"success": True, "message": "Customer deleted successfully!"}


@customers.put("/{customer_id}/loyalty-points")
def set_loyalty_points(customer_id: int, body: LoyaltyUpdate, db: Session = Depends(get_db)):
    if body.loyalty_points < 0:
        raise HTTPException(status_code=400, detail="Loyalty points cannot be negative.")
    customer = _get_or_404(db, Customer, customer_id, "Customer")
    customer.loyalty_points = body.loyalty_points
    db.commit()
    db.refresh(customer)
    return {"success": True, "data": _dump(CustomerOut, customer)}


@customers.post("/{customer_id}/redeem-points")
def redeem_points(customer_id: int, body: RedeemRequest, db: Session = Depends(get_db)):
    points = body.points_to_redeem
    if points <= 0:
        raise HTTPException(status_code=400, detail="Points to redeem must be greater than 0.")
    if points < Config.MIN_REDEEM_POINTS:
        raise HTTPException(status_code=400, detail=f"Minimum {Config.MIN_REDEEM_POINTS} points required for redemption.")
    customer = _get_or_404(db, Customer, customer_id, "Customer")
    if customer.loyalty_points < points:
        raise HTTPException(status_code=400,
                            detail=f"Insufficient points. Available: {customer.loyalty_points}, Requested: {points}")
    customer.loyalty_points -= points
    db.commit()
    db.refresh(customer)
    # 1 point = 1 rupee
    return {"success": True, "message": f"Successfully redeemed {points} points for ₹{points}",
            "data": _dump(CustomerOut, customer), "redeemedPoints": points,
            "redemptionValue": points, "remainingPoints": customer.loyalty_points}


# Sales

@sales.post("/", status_code=201)
def create_sale(body: SaleIn, db: Session = Depends(get_db)):
    subtotal = gst_total = 0.0
    lines = []
    claimed: Dict[int, int] = {}  # stock id -> units already taken by earlier lines
    for item in body.items:
        # FEFO: candidate batches with stock left, nearest expiry first
        batches = (db.query(Stock)
                   .filter(Stock.product_name == item.product_name, Stock.quantity > 0)
                   .order_by(Stock.expiry_date)
                   .all())
        if not batches:
            raise HTTPException(status_code=400, detail=f"Product {item.product_name} not found in stock")
        stock = next((b for b in batches if b.batch_id == item.batch_id), None)
        if stock is None:
            raise HTTPException(status_code=400, detail=f"Batch {item.batch_id} not available for {item.product_name}")
        available = stock.quantity - claimed.get(stock.id, 0)
        if available < item.quantity:
            raise HTTPException(status_code=400,
                                detail=f"Only {available} available for {item.product_name} (Batch: {item.batch_id})")
        claimed[stock.id] = claimed.get(stock.id, 0) + item.quantity

        net = (item.mrp - item.discount) * item.quantity
        item_gst = net * item.gst / 100
        subtotal += item.mrp * item.quantity
        gst_total += item_gst
        lines.append((stock, SaleItem(product_name=item.product_name, batch_id=item.batch_id,
                                      packing=stock.packing, quantity=item.quantity, mrp=item.mrp,
                                      gst=item.gst, discount=item.discount, expiry_date=stock.expiry_date,
                                      total=round(net + item_gst, 2))))

    if body.total_discount > subtotal:
        raise HTTPException(status_code=400, detail="Total discount cannot exceed subtotal")
    total = subtotal - body.total_discount + gst_total

    customer = db.query(Customer).filter(Customer.customer_contact == body.customer.contact).first()
    redeemed = body.redeemed_points
    if redeemed > 0:
        if customer is None:
            raise HTTPException(status_code=400, detail="Customer not found for loyalty points redemption")
        if customer.loyalty_points < redeemed:
            raise HTTPException(status_code=400, detail=(f"Insufficient loyalty points. Available: "
                                                         f"{customer.loyalty_points}, Requested: {redeemed}"))

    sale = Sale(customer_name=body.customer.name, customer_contact=body.customer.contact,
                customer_email=body.customer.email, payment_type=body.payment_type,
                subtotal=round(subtotal, 2), total_discount=round(body.total_discount, 2),
                gst_total=round(gst_total, 2), total_amount=round(total, 2))
    for stock, line in lines:
        stock.quantity -= line.quantity
        sale.items.append(line)
    db.add(sale)

    # Points accrue on the amount before redemption was taken off
    earned = math.floor((total + redeemed) / 100)
    if customer is not None:
        customer.loyalty_points += earned - redeemed
    elif earned > 0:
        db.add(Customer(customer_name=body.customer.name, customer_contact=body.customer.contact,
                        email=body.customer.email or "", loyalty_points=earned))
    db.commit()
    db.refresh(sale)
    logger.info(f"[RECORDS] Sale {sale.invoice_number} total={sale.total_amount} points_earned={earned}")
    return {"success": True, "message": "Sale completed successfully", "data": _dump(SaleOut, sale),
            "loyaltyPointsEarned": earned}


@sales.get("/")
def list_sales(db: Session = Depends(get_db)):
    rows = db.query(Sale).order_by(Sale.created_at.desc(), Sale.id.desc()).all()
    return {"success": True, "data": [_dump(SaleOut, s) for s in rows]}


@sales.get("/{sale_id}")
def get_sale(sale_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": _dump(SaleOut, _get_or_404(db, Sale, sale_id, "Sale"))}


@sales.delete("/{sale_id}")
def delete_sale(sale_id: int, db: Session = Depends(get_db)):
    db.delete(_get_or_404(db, Sale, sale_id, "Sale"))
    db.commit()
    return {"success": True, "message": "Sale deleted successfully"}


# Purchases

@purchases.post("/add", status_code=201)
def add_purchase(body: PurchaseIn, db: Session = Depends(get_db)):
    purchase = Purchase(supplier_name=body.supplier_name, invoice_number=body.invoice_number,
                        payment_type=body.payment_type, grand_total=0)
    if body.date:
        purchase.date = body.date

    grand_total = 0.0
    for product in body.products:
        amount = product.rate * product.quantity * (1 + product.gst / 100)
        grand_total += amount
        purchase.products.append(PurchaseItem(**product.model_dump(), amount=round(amount, 2)))

        stock = (db.query(Stock)
                 .filter(Stock.product_name == product.product_name,
                         Stock.batch_id == product.batch_id,
                         Stock.rate == product.rate)
                 .first())
        if stock:
            stock.quantity += product.quantity
        else:
            db.add(Stock(**product.model_dump(), supplier_name=body.supplier_name))
    purchase.grand_total = round(grand_total, 2)

    db.add(purchase)
    db.commit()
    db.refresh(purchase)
    return {"success": True, "message": "Purchase added and stock updated successfully!",
            "data": _dump(PurchaseOut, purchase)}


@purchases.get("/")
def list_purchases(db: Session = Depends(get_db)):
    rows = db.query(Purchase).order_by(Purchase.date.desc(), Purchase.id.desc()).all()
    return {"success": True, "data": [_dump(PurchaseOut, p) for p in rows]}


@purchases.delete("/{purchase_id}")
def delete_purchase(purchase_id: int, db: Session = Depends(get_db)):
    db.delete(_get_or_404(db, Purchase, purchase_id, "Purchase"))
    db.commit()
    return {"success": True, "message": "Purchase deleted successfully"}


# Products

@products.post("/", status_code=201)
def add_product(body: ProductIn, db: Session = Depends(get_db)):
    product = Product(**body.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    return {"success": True, "data": _dump(ProductOut, product)}


@products.get("/")
def list_products(db: Session = Depends(get_db)):
    return {"success": True, "data": [_dump(ProductOut, p) for p in db.query(Product).order_by(Product.product_name).all()]}


@products.get("/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": _dump(ProductOut, _get_or_404(db, Product, product_id, "Product"))}


@products.put("/{product_id}")
def update_product(product_id: int, body: ProductIn, db: Session = Depends(get_db)):
    product = _get_or_404(db, Product, product_id, "Product")
    for field, value in body.model_dump().items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    return {"success": True, "data": _dump(ProductOut, product)}


@products.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    db.delete(_get_or_404(db, Product, product_id, "Product"))
    db.commit()
    return {"success": True, "message": "Product deleted successfully"}


# Suppliers

def _check_supplier_unique(db: Session, body: SupplierIn, exclude_id: Optional[int] = None):
    query = db.query(Supplier)
    if exclude_id is not None:
        query = query.filter(Supplier.id != exclude_id)
    if query.filter(Supplier.contact_number == body.contact_number).first():
        raise HTTPException(status_code=400, detail="Supplier with this contact number already exists.")
    if query.filter(Supplier.email == body.email).first():
        raise HTTPException(status_code=400, detail="Supplier with this email already exists.")


@suppliers.post("/", status_code=201)
def add_supplier(body: SupplierIn, db: Session = Depends(get_db)):
    _check_supplier_unique(db, body)
    supplier = Supplier(**body.model_dump())
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return {"success": True, "message": "Supplier added successfully!", "data": _dump(SupplierOut, supplier)}


@suppliers.get("/")
def list_suppliers(search: Optional[str] = None, db: Session = Depends(get_db)):
    query = db.query(Supplier)
    if search:
        if search.isdigit():
            query = query.filter(Supplier.contact_number.contains(search))
        else:
            query = query.filter(Supplier.supplier_name.ilike(f"{search}%"))
    rows = query.order_by(Supplier.supplier_name).limit(20).all()
    return {"success": True, "data": [_dump(SupplierOut, s) for s in rows]}


@suppliers.put("/{supplier_id}")
def update_supplier(supplier_id: int, body: SupplierIn, db: Session = Depends(get_db)):
    supplier = _get_or_404(db, Supplier, supplier_id, "Supplier")
    _check_supplier_unique(db, body, exclude_id=supplier_id)
    for field, value in body.model_dump().items():
        setattr(supplier, field, value)
    db.commit()
    db.refresh(supplier)
    return {"success": True, "data": _dump(SupplierOut, supplier)}


@suppliers.delete("/{supplier_id}")
def delete_supplier(supplier_id: int, db: Session = Depends(get_db)):
    db.delete(_get_or_404(db, Supplier, supplier_id, "Supplier"))
    db.commit()
    return {"success": True, "message": "Supplier deleted successfully"}
