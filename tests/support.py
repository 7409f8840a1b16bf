"""
Shared helpers for the test suite.

PURPOSE:
    In-memory SQLite sessions, small record builders and a fake external
    lookup client so tests never touch the network or the real database file.
"""

import itertools
import unittest
from datetime import datetime, timedelta

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pharmacy.app.controller import Controller
from pharmacy.app.main import app, get_controller
from pharmacy.data import models  # noqa: F401
from pharmacy.data.database import Base, get_db
from pharmacy.data.models import Customer, Sale, SaleItem, Stock, StockCategory
from pharmacy.schemas.io_models import ExternalLookupResult


def make_session_factory(create=True, tables=None):
    """In-memory database; ``tables`` limits creation to those tables, ``create=False`` creates none."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    if create:
        Base.metadata.create_all(bind=engine, tables=tables)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def add_stock(db, product_name, quantity=50, expiry_days=365, batch_id=None, mrp=100.0,
              rack_number="Rack-1", shelf_number="Shelf-1", rate=70.0, gst=12.0):
    item = Stock(
        product_name=product_name,
        generic_name=product_name,
        batch_id=batch_id or f"B-{product_name[:3].upper()}",
        mrp=mrp,
        rate=rate,
        gst=gst,
        packing="10 Tablets",
        quantity=quantity,
        expiry_date=datetime.now() + timedelta(days=expiry_days),
        supplier_name="Test Supplier",
        category=StockCategory.tablets,
        rack_number=rack_number,
        shelf_number=shelf_number,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def add_customer(db, name, contact, points=0):
    customer = Customer(customer_name=name, customer_contact=contact, loyalty_points=points)
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


_invoice_seq = itertools.count(100001)


def add_sale(db, customer_name, lines, created_at=None, invoice_number=None):
    """lines: iterable of (product_name, quantity, line_total)."""
    created_at = created_at or datetime.now()
    total = sum(t for _, _, t in lines)
    sale = Sale(
        invoice_number=invoice_number or f"INV-{next(_invoice_seq)}",
        date=created_at,
        created_at=created_at,
        customer_name=customer_name,
        customer_contact="9000000000",
        subtotal=total,
        gst_total=0,
        total_amount=total,
    )
    for name, qty, line_total in lines:
        sale.items.append(SaleItem(product_name=name, batch_id="B-1", mrp=10.0, packing="10 Tablets",
                                   quantity=qty, expiry_date=datetime.now() + timedelta(days=200),
                                   total=line_total))
    db.add(sale)
    db.commit()
    db.refresh(sale)
    return sale


def lookup_result(source, content="", **buckets):
    info = {name: [] for name in ("interactions", "side_effects", "dosage", "warnings",
                                  "contraindications", "pregnancy")}
    info.update(buckets)
    return ExternalLookupResult(source=source, content=content, medical_info=info, timestamp=datetime.now())


class FakeLookup:
    """Stands in for ExternalLookupClient; returns canned results per search term."""

    def __init__(self, results=None):
        self.results = results or {}
        self.calls = []

    def search(self, term):
        self.calls.append(term)
        return self.results.get(term, [])


class ApiTestCase(unittest.TestCase):
    """TestClient against the real app with the database and controller swapped out.

    The client is not used as a context manager so the startup hook never
    touches the configured database file.
    """

    def setUp(self):
        self.Session = make_session_factory()
        self.db = self.Session()
        self.lookup = FakeLookup()

        def override_get_db():
            db = self.Session()
            try:
                yield db
            finally:
                db.close()

        controller = Controller(session_factory=self.Session, lookup=self.lookup)
        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_controller] = lambda: controller
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.db.close()

    def fresh_session(self):
        """A session with an empty identity map, for reading what a request wrote."""
        db = self.Session()
        self.addCleanup(db.close)
        return db
