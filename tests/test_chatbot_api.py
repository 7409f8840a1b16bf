#!/usr/bin/env python3
"""
Chatbot API Tests

PURPOSE:
    Drive the /api/chatbot endpoints through FastAPI's TestClient with an
    in-memory database and a fake external lookup client.

TEST COVERAGE:
    - /chat validation, routing, camelCase analysis and error envelope
    - /drug-interactions validation and structured report
    - /insights capped counts
    - /reports for every report type and unknown types
    - Error shape for unknown routes
"""

import unittest
from datetime import datetime, timedelta
from unittest.mock import Mock

from pharmacy.app.main import app, get_controller
from support import ApiTestCase, add_customer, add_sale, add_stock


class TestChatEndpoint(ApiTestCase):

    def test_missing_message(self):
        response = self.client.post("/api/chatbot/chat", json={})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"success": False, "message": "Message is required"})

    def test_blank_message(self):
        response = self.client.post("/api/chatbot/chat", json={"message": "   "})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Message is required")

    def test_greeting(self):
        response = self.client.post("/api/chatbot/chat", json={"message": "hi"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["context"], "general")
        self.assertEqual(body["analysis"]["category"], "general")
        self.assertEqual(body["analysis"]["confidence"], 60)
        self.assertIn("Welcome to your Pharmacy AI Assistant", body["response"])

    def test_context_is_echoed(self):
        response = self.client.post("/api/chatbot/chat", json={"message": "hello", "context": "dashboard"})
        self.assertEqual(response.json()["context"], "dashboard")

    def test_stock_alerts_use_records(self):
        add_stock(self.db, "Betadine Ointment", quantity=3)
        response = self.client.post("/api/chatbot/chat", json={"message": "low stock items"})
        body = response.json()
        self.assertEqual(body["analysis"]["category"], "stock")
        self.assertTrue(body["analysis"]["hasStockKeywords"])
        self.assertIn("Betadine Ointment: 3 units remaining", body["response"])

    def test_interaction_reply(self):
        response = self.client.post("/api/chatbot/chat",
                                    json={"message": "check interactions between aspirin and warfarin"})
        body = response.json()
        self.assertEqual(body["analysis"]["category"], "interaction")
        self.assertEqual(body["analysis"]["medications"], ["aspirin", "warfarin"])
        self.assertIn("INTERACTIONS FOUND", body["response"])
        self.assertEqual(self.lookup.calls, [])

    def test_controller_failure(self):
        broken = Mock()
        broken.handle_query.side_effect = RuntimeError("classifier exploded")
        app.dependency_overrides[get_controller] = lambda: broken
        response = self.client.post("/api/chatbot/chat", json={"message": "hi"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {
            "success": False,
            "message": "Failed to process chat request",
            "error": "classifier exploded",
        })


class TestDrugInteractionsEndpoint(ApiTestCase):

    def test_needs_two_medications(self):
        for payload in ({}, {"medications": []}, {"medications": ["aspirin"]}, {"medications": ["aspirin", " "]}):
            with self.subTest(payload=payload):
                response = self.client.post("/api/chatbot/drug-interactions", json=payload)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["message"],
                                 "Please provide at least 2 medications to check for interactions")

    def test_high_severity(self):
        response = self.client.post("/api/chatbot/drug-interactions", json={"medications": ["aspirin", "warfarin"]})
        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["severity"], "HIGH")
        self.assertTrue(data["hasInteractions"])
        self.assertEqual(len(data["interactions"]), 2)
        self.assertEqual(set(data["interactions"][0]), {"medication1", "medication2", "warning"})
        self.assertIn("Peptic ulcer", data["warnings"])

    def test_low_severity(self):
        response = self.client.post("/api/chatbot/drug-interactions", json={"medications": ["zyrtec", "allegra"]})
        data = response.json()["data"]
        self.assertEqual(data["severity"], "LOW")
        self.assertFalse(data["hasInteractions"])
        self.assertEqual(data["interactions"], [])
        self.assertEqual(data["warnings"], [])


class TestInsightsEndpoint(ApiTestCase):

    def test_counts_are_capped(self):
        for i in range(7):
            add_stock(self.db, f"Low {i}", quantity=2, batch_id=f"L{i}")
        add_stock(self.db, "Expiring", quantity=80, expiry_days=7)
        add_customer(self.db, "Asha", "9000000001")
        for _ in range(6):
            add_sale(self.db, "Asha", [("Low 0", 1, 10.0)])

        response = self.client.get("/api/chatbot/insights")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "insights": {
            "totalStock": 8,
            "lowStockItems": 5,
            "expiringItems": 1,
            "totalCustomers": 1,
            "totalSales": 6,
            "recentSales": 5,
        }})

    def test_empty_database(self):
        insights = self.client.get("/api/chatbot/insights").json()["insights"]
        self.assertTrue(all(v == 0 for v in insights.values()))


class TestReportsEndpoint(ApiTestCase):

    def test_unknown_or_missing_type(self):
        for payload in ({}, {"reportType": "bogus"}):
            with self.subTest(payload=payload):
                response = self.client.post("/api/chatbot/reports", json=payload)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json(), {"success": False, "message": "Invalid report type"})

    def test_sales_summary(self):
        today = datetime.now()
        add_sale(self.db, "Asha", [("DOLO 650", 1, 100.0)], created_at=today)
        add_sale(self.db, "Ravi", [("DOLO 650", 1, 50.5)], created_at=today)
        add_sale(self.db, "Ravi", [("DOLO 650", 1, 20.0)], created_at=today - timedelta(days=2))

        body = self.client.post("/api/chatbot/reports", json={"reportType": "sales_summary"}).json()
        self.assertEqual(body["reportType"], "sales_summary")
        days = body["reportData"]["salesData"]
        self.assertEqual(days[0], {"_id": today.strftime("%Y-%m-%d"), "totalSales": 150.5, "count": 2})
        self.assertEqual(days[1]["_id"], (today - timedelta(days=2)).strftime("%Y-%m-%d"))
        self.assertEqual(len(days), 2)

    def test_sales_summary_keeps_latest_seven_days(self):
        for back in range(10):
            add_sale(self.db, "Asha", [("DOLO 650", 1, 10.0)], created_at=datetime.now() - timedelta(days=back))
        days = self.client.post("/api/chatbot/reports", json={"reportType": "sales_summary"}).json()
        ids = [d["_id"] for d in days["reportData"]["salesData"]]
        self.assertEqual(len(ids), 7)
        self.assertEqual(ids, sorted(ids, reverse=True))

    def test_stock_alerts(self):
        add_stock(self.db, "Betadine Ointment", quantity=3)
        add_stock(self.db, "Benadryl", quantity=40, expiry_days=10)
        add_stock(self.db, "Glycomet", quantity=90)
        body = self.client.post("/api/chatbot/reports", json={"reportType": "stock_alerts"}).json()
        names = [a["productName"] for a in body["reportData"]["alerts"]]
        self.assertEqual(names, ["Betadine Ointment", "Benadryl"])

    def test_customer_loyalty(self):
        add_customer(self.db, "Asha", "9000000001", points=120)
        add_customer(self.db, "Ravi", "9000000002", points=50)
        add_customer(self.db, "Meena", "9000000003", points=49)
        body = self.client.post("/api/chatbot/reports", json={"reportType": "customer_loyalty"}).json()
        rows = body["reportData"]["loyaltyData"]
        self.assertEqual([(r["customerName"], r["loyaltyPoints"]) for r in rows], [("Asha", 120), ("Ravi", 50)])


class TestMisc(ApiTestCase):

    def test_health(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "healthy"})

    def test_unknown_route_uses_error_envelope(self):
        response = self.client.get("/api/nothing-here")
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.json()["success"])


if __name__ == "__main__":
    unittest.main()
