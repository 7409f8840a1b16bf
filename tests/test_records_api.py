#!/usr/bin/env python3
"""
Records API Tests

PURPOSE:
    Verify the record-keeping routes that feed the chatbot: stock, customers,
    sales with loyalty accounting, purchases, products and suppliers.

TEST COVERAGE:
    - Near-expiry discount and rack grouping
    - JSON error envelope for unexpected failures
    - Customer uniqueness, search and point redemption rules
    - Sale validation, stock decrement and loyalty accrual
    - Purchase totals and stock merging
    - Supplier validation and product CRUD
    - CSV seeding of the stock table
"""

import unittest
from datetime import datetime, timedelta

from fastapi.testclient import TestClient

from pharmacy.app.main import app
from pharmacy.app.records import add_months, near_expiry_discount
from pharmacy.data.models import Customer, Stock
from pharmacy.data.populate_db import populate_stock
from support import ApiTestCase, add_customer, add_stock, make_session_factory


def sale_payload(batch_id="B1", quantity=2, contact="9876543210", **extra):
    payload = {
        "customer": {"name": "Asha", "contact": contact, "email": "asha@example.com"},
        "items": [{"productName": "DOLO 650", "batchId": batch_id, "quantity": quantity,
                   "mrp": 100, "gst": 12, "discount": 0}],
        "paymentType": "Cash",
    }
    payload.update(extra)
    return payload


def purchase_payload(invoice="PUR-1", quantity=2):
    return {
        "supplierName": "Micro Labs",
        "invoiceNumber": invoice,
        "paymentType": "UPI",
        "products": [{
            "productName": "Amlong 5", "genericName": "Amlodipine", "batchId": "AM-1",
            "category": "Tablets", "mrp": 52, "packing": "15 Tablets", "quantity": quantity,
            "rate": 50, "gst": 5, "expiryDate": "2030-01-31T00:00:00",
        }],
    }


class TestNearExpiryDiscount(unittest.TestCase):

    def test_add_months_clamps_day(self):
        self.assertEqual(add_months(datetime(2024, 11, 30), 3), datetime(2025, 2, 28))
        self.assertEqual(add_months(datetime(2024, 1, 15, 9, 30), 1), datetime(2024, 2, 15, 9, 30))

    def test_within_window(self):
        info = near_expiry_discount(datetime(2024, 3, 1), 150.0, now=datetime(2024, 1, 31))
        self.assertEqual(info, {"discount": 20, "discounted_price": 120.0,
                                "days_until_expiry": 30, "months_until_expiry": 1.0})

    def test_outside_window(self):
        now = datetime(2024, 1, 31)
        for expiry in (datetime(2024, 5, 1), datetime(2024, 1, 1)):
            with self.subTest(expiry=expiry):
                info = near_expiry_discount(expiry, 150.0, now=now)
                self.assertEqual(info["discount"], 0)
                self.assertEqual(info["discounted_price"], 150.0)
                self.assertIsNone(info["days_until_expiry"])


class TestStockRoutes(ApiTestCase):

    def test_list_applies_discount(self):
        add_stock(self.db, "Combiflam", expiry_days=30, mrp=100.0)
        add_stock(self.db, "Glycomet", expiry_days=400, mrp=40.0)
        rows = {r["productName"]: r for r in self.client.get("/api/stocks/").json()["data"]}
        self.assertEqual(rows["Combiflam"]["discount"], 20)
        self.assertEqual(rows["Combiflam"]["discountedPrice"], 80.0)
        self.assertEqual(rows["Combiflam"]["daysUntilExpiry"], 30)
        self.assertEqual(rows["Glycomet"]["discount"], 0)
        self.assertEqual(rows["Glycomet"]["discountedPrice"], 40.0)

    def test_add_stock_merges_batches(self):
        add_stock(self.db, "DOLO 650", quantity=10, batch_id="B1")
        body = {"supplierName": "Micro Labs", "products": [
            {"productName": "DOLO 650", "batchId": "B1", "mrp": 30, "rate": 22, "packing": "15 Tablets",
             "quantity": 5, "expiryDate": "2030-01-01T00:00:00", "genericName": "Paracetamol",
             "category": "Tablets"},
            {"productName": "Crocin", "batchId": "C1", "mrp": 20, "rate": 14, "packing": "15 Tablets",
             "quantity": 7, "expiryDate": "2030-01-01T00:00:00", "genericName": "Paracetamol",
             "category": "Tablets"},
        ]}
        response = self.client.post("/api/stocks/add-stock", json=body)
        self.assertEqual(response.status_code, 200)
        db = self.fresh_session()
        self.assertEqual(db.query(Stock).filter_by(product_name="DOLO 650").one().quantity, 15)
        crocin = db.query(Stock).filter_by(product_name="Crocin").one()
        self.assertEqual(crocin.supplier_name, "Micro Labs")
        self.assertEqual(crocin.rack_number, "Rack-1")

    def test_invalid_category_is_rejected(self):
        body = {"supplierName": "X", "products": [
            {"productName": "Y", "batchId": "1", "mrp": 1, "rate": 1, "packing": "p", "quantity": 1,
             "expiryDate": "2030-01-01T00:00:00", "genericName": "g", "category": "Gummies"}]}
        response = self.client.post("/api/stocks/add-stock", json=body)
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()["success"])

    def test_update_and_delete(self):
        item = add_stock(self.db, "DOLO 650")
        response = self.client.put(f"/api/stocks/{item.id}", json={"rackNumber": "Rack-9", "quantity": 3})
        self.assertEqual(response.json()["data"]["rackNumber"], "Rack-9")
        self.assertEqual(response.json()["data"]["quantity"], 3)
        self.assertEqual(self.client.delete(f"/api/stocks/{item.id}").status_code, 200)
        response = self.client.delete(f"/api/stocks/{item.id}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Stock item not found")

    def test_unexpected_error_keeps_json_envelope(self):
        item = add_stock(self.db, "DOLO 650")
        client = TestClient(app, raise_server_exceptions=False)
        response = client.put(f"/api/stocks/{item.id}", json={"productName": None})
        self.assertEqual(response.status_code, 500)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["message"], f"Failed to process PUT /api/stocks/{item.id}")
        self.assertIn("error", body)
        self.assertEqual(self.fresh_session().get(Stock, item.id).product_name, "DOLO 650")

    def test_rack_management(self):
        add_stock(self.db, "DOLO 650", rack_number="Rack-1", shelf_number="Shelf-1")
        add_stock(self.db, "Crocin", rack_number="Rack-1", shelf_number="Shelf-1")
        add_stock(self.db, "Amlong", rack_number="Rack-2", shelf_number="Shelf-1")
        data = self.client.get("/api/stocks/rack-management").json()["data"]
        self.assertEqual(data["totalRacks"], 2)
        self.assertEqual(data["totalShelves"], 2)
        self.assertEqual(data["totalItems"], 3)
        self.assertEqual(data["locations"], ["Rack-1-Shelf-1", "Rack-2-Shelf-1"])
        shelf = data["rackGroups"]["Rack-1"][0]
        self.assertEqual([i["productName"] for i in shelf["items"]], ["Crocin", "DOLO 650"])

    def test_update_discounts_persists(self):
        add_stock(self.db, "Combiflam", expiry_days=30, mrp=50.0)
        add_stock(self.db, "Glycomet", expiry_days=400, mrp=40.0)
        body = self.client.post("/api/stocks/update-discounts").json()
        self.assertEqual(body["updatedCount"], 2)
        db = self.fresh_session()
        combiflam = db.query(Stock).filter_by(product_name="Combiflam").one()
        self.assertEqual((combiflam.discount, combiflam.discounted_price), (20, 40.0))
        glycomet = db.query(Stock).filter_by(product_name="Glycomet").one()
        self.assertEqual((glycomet.discount, glycomet.discounted_price), (0, 40.0))


class TestCustomerRoutes(ApiTestCase):

    def test_add_and_duplicate(self):
        body = {"customerName": "Asha", "customerContact": "9000000001"}
        first = self.client.post("/api/customers/add", json=body)
        self.assertEqual(first.status_code, 201)
        self.assertEqual(first.json()["data"]["loyaltyPoints"], 0)
        second = self.client.post("/api/customers/add", json=body)
        self.assertEqual(second.status_code, 400)
        self.assertEqual(second.json()["message"], "Customer with this contact already exists")

    def test_search(self):
        add_customer(self.db, "Asha", "9000000001")
        add_customer(self.db, "Ravi", "8000000002")
        self.assertEqual(self.client.get("/api/customers/search", params={"contact": "90"}).status_code, 400)
        rows = self.client.get("/api/customers/search", params={"contact": "900"}).json()["data"]
        self.assertEqual([r["customerName"] for r in rows], ["Asha"])

    def test_loyalty_points_cannot_be_negative(self):
        customer = add_customer(self.db, "Asha", "9000000001", points=10)
        response = self.client.put(f"/api/customers/{customer.id}/loyalty-points", json={"loyaltyPoints": -5})
        self.assertEqual(response.status_code, 400)
        response = self.client.put(f"/api/customers/{customer.id}/loyalty-points", json={"loyaltyPoints": 75})
        self.assertEqual(response.json()["data"]["loyaltyPoints"], 75)

    def test_redeem_rules(self):
        customer = add_customer(self.db, "Asha", "9000000001", points=120)
        url = f"/api/customers/{customer.id}/redeem-points"
        cases = {
            0: "Points to redeem must be greater than 0.",
            30: "Minimum 50 points required for redemption.",
            200: "Insufficient points. Available: 120, Requested: 200",
        }
        for points, message in cases.items():
            with self.subTest(points=points):
                response = self.client.post(url, json={"pointsToRedeem": points})
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["message"], message)

        body = self.client.post(url, json={"pointsToRedeem": 60}).json()
        self.assertEqual((body["redeemedPoints"], body["redemptionValue"], body["remainingPoints"]), (60, 60, 60))

    def test_redeem_unknown_customer(self):
        self.assertEqual(self.client.post("/api/customers/99/redeem-points", json={"pointsToRedeem": 60}).status_code, 404)


class TestSaleRoutes(ApiTestCase):

    def setUp(self):
        super().setUp()
        add_stock(self.db, "DOLO 650", quantity=50, batch_id="B1", mrp=100.0, gst=12.0)

    def test_sale_decrements_stock_and_creates_customer(self):
        response = self.client.post("/api/sales/", json=sale_payload())
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["data"]["subtotal"], 200.0)
        self.assertEqual(body["data"]["gstTotal"], 24.0)
        self.assertEqual(body["data"]["totalAmount"], 224.0)
        self.assertEqual(body["data"]["items"][0]["total"], 224.0)
        self.assertEqual(body["loyaltyPointsEarned"], 2)

        db = self.fresh_session()
        self.assertEqual(db.query(Stock).filter_by(batch_id="B1").one().quantity, 48)
        customer = db.query(Customer).filter_by(customer_contact="9876543210").one()
        self.assertEqual(customer.loyalty_points, 2)

    def test_small_sale_does_not_create_customer(self):
        payload = sale_payload(quantity=1, totalDiscount=50)
        body = self.client.post("/api/sales/", json=payload).json()
        self.assertEqual(body["loyaltyPointsEarned"], 0)
        self.assertEqual(self.fresh_session().query(Customer).count(), 0)

    def test_redemption(self):
        add_customer(self.db, "Asha", "9876543210", points=100)
        payload = sale_payload(redeemedPoints=50, totalDiscount=50)
        body = self.client.post("/api/sales/", json=payload).json()
        self.assertEqual(body["data"]["totalAmount"], 174.0)
        self.assertEqual(body["loyaltyPointsEarned"], 2)
        customer = self.fresh_session().query(Customer).filter_by(customer_contact="9876543210").one()
        self.assertEqual(customer.loyalty_points, 52)

    def test_redemption_needs_customer_and_balance(self):
        response = self.client.post("/api/sales/", json=sale_payload(redeemedPoints=10))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Customer not found for loyalty points redemption")

        add_customer(self.db, "Asha", "9876543210", points=5)
        response = self.client.post("/api/sales/", json=sale_payload(redeemedPoints=10))
        self.assertEqual(response.status_code, 400)
        self.assertIn("Insufficient loyalty points", response.json()["message"])

    def test_batch_and_quantity_checks(self):
        cases = [
            (sale_payload(batch_id="B9"), "Batch B9 not available for DOLO 650"),
            (sale_payload(quantity=51), "Only 50 available for DOLO 650 (Batch: B1)"),
        ]
        missing = sale_payload()
        missing["items"][0]["productName"] = "Zyrtec"
        cases.append((missing, "Product Zyrtec not found in stock"))
        for payload, message in cases:
            with self.subTest(message=message):
                response = self.client.post("/api/sales/", json=payload)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["message"], message)
        self.assertEqual(self.fresh_session().query(Stock).filter_by(batch_id="B1").one().quantity, 50)

    def test_repeated_batch_lines_share_the_batch_quantity(self):
        payload = sale_payload(quantity=30)
        payload["items"].append(dict(payload["items"][0]))
        response = self.client.post("/api/sales/", json=payload)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Only 20 available for DOLO 650 (Batch: B1)")
        self.assertEqual(self.fresh_session().query(Stock).filter_by(batch_id="B1").one().quantity, 50)

        payload["items"][1]["quantity"] = 20
        self.assertEqual(self.client.post("/api/sales/", json=payload).status_code, 201)
        self.assertEqual(self.fresh_session().query(Stock).filter_by(batch_id="B1").one().quantity, 0)

    def test_discount_cannot_exceed_subtotal(self):
        response = self.client.post("/api/sales/", json=sale_payload(totalDiscount=500))
        self.assertEqual(response.status_code, 400)

    def test_list_get_delete(self):
        sale_id = self.client.post("/api/sales/", json=sale_payload()).json()["data"]["id"]
        self.assertEqual(len(self.client.get("/api/sales/").json()["data"]), 1)
        self.assertEqual(self.client.get(f"/api/sales/{sale_id}").json()["data"]["customerName"], "Asha")
        self.assertEqual(self.client.delete(f"/api/sales/{sale_id}").status_code, 200)
        self.assertEqual(self.client.get(f"/api/sales/{sale_id}").status_code, 404)


class TestPurchaseRoutes(ApiTestCase):

    def test_purchase_adds_then_merges_stock(self):
        response = self.client.post("/api/purchases/add", json=purchase_payload())
        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["products"][0]["amount"], 105.0)
        self.assertEqual(data["grandTotal"], 105.0)

        self.client.post("/api/purchases/add", json=purchase_payload(invoice="PUR-2", quantity=3))
        stock = self.fresh_session().query(Stock).filter_by(batch_id="AM-1").one()
        self.assertEqual(stock.quantity, 5)
        self.assertEqual(stock.supplier_name, "Micro Labs")

    def test_list_and_delete(self):
        purchase_id = self.client.post("/api/purchases/add", json=purchase_payload()).json()["data"]["id"]
        self.assertEqual(len(self.client.get("/api/purchases/").json()["data"]), 1)
        self.assertEqual(self.client.delete(f"/api/purchases/{purchase_id}").status_code, 200)
        self.assertEqual(self.client.get("/api/purchases/").json()["data"], [])


class TestProductAndSupplierRoutes(ApiTestCase):

    def test_product_crud(self):
        body = {"productName": "DOLO 650", "genericName": "Paracetamol", "category": "Tablets",
                "purpose": "Fever", "gst": 12}
        product_id = self.client.post("/api/products/", json=body).json()["data"]["id"]
        self.assertEqual(self.client.get(f"/api/products/{product_id}").json()["data"]["purpose"], "Fever")
        body["purpose"] = "Pain relief"
        self.assertEqual(self.client.put(f"/api/products/{product_id}", json=body).json()["data"]["purpose"],
                         "Pain relief")
        self.client.delete(f"/api/products/{product_id}")
        response = self.client.get(f"/api/products/{product_id}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Product not found")

    def test_supplier_phone_validation(self):
        body = {"supplierName": "Medi", "contactNumber": "12345", "email": "a@b.in", "organisation": "Medi Co"}
        response = self.client.post("/api/suppliers/", json=body)
        self.assertEqual(response.status_code, 400)
        self.assertIn("10 to 15 digits", response.json()["message"])

    def test_supplier_uniqueness_and_search(self):
        body = {"supplierName": "Medi", "contactNumber": "9000000001", "email": "a@b.in", "organisation": "Medi Co"}
        self.assertEqual(self.client.post("/api/suppliers/", json=body).status_code, 201)
        duplicate_email = {**body, "contactNumber": "9000000002"}
        response = self.client.post("/api/suppliers/", json=duplicate_email)
        self.assertEqual(response.json()["message"], "Supplier with this email already exists.")
        response = self.client.post("/api/suppliers/", json={**body, "email": "c@d.in"})
        self.assertEqual(response.json()["message"], "Supplier with this contact number already exists.")

        self.assertEqual(len(self.client.get("/api/suppliers/", params={"search": "med"}).json()["data"]), 1)
        self.assertEqual(len(self.client.get("/api/suppliers/", params={"search": "9000"}).json()["data"]), 1)
        self.assertEqual(self.client.get("/api/suppliers/", params={"search": "zzz"}).json()["data"], [])


class TestPopulateStock(unittest.TestCase):

    def test_seeds_once(self):
        Session = make_session_factory()
        self.assertEqual(populate_stock(Session), 8)
        self.assertEqual(populate_stock(Session), 0)
        db = Session()
        try:
            dolo = db.query(Stock).filter_by(product_name="DOLO 650").one()
            self.assertEqual((dolo.rack_number, dolo.shelf_number), ("Rack-1", "Shelf-1"))
            self.assertGreater(dolo.expiry_date, datetime.now() + timedelta(days=400))
        finally:
            db.close()


if __name__ == "__main__":
    unittest.main()
