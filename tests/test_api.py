import unittest
from datetime import date, timedelta
from unittest import mock

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from storeadmin.database import Base, build_engine
from storeadmin.dependencies import get_db
from storeadmin.main import app
from storeadmin.models import import_all_models


class ApiTest(unittest.TestCase):
    def setUp(self):
        self.engine = build_engine("sqlite:///:memory:")
        import_all_models()
        Base.metadata.create_all(bind=self.engine)
        Session = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

        def override_get_db():
            db = Session()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)
        self.today = date.today()

    def tearDown(self):
        app.dependency_overrides.clear()
        self.engine.dispose()

    def _create_product(self, **overrides):
        payload = {"name": "Silk Dress", "category": "Women", "sizes": ["S", "M"], "colors": ["Red"]}
        payload.update(overrides)
        response = self.client.post("/products", json=payload)
        self.assertEqual(response.status_code, 201, response.text)
        product = response.json()
        inventory = self.client.get("/inventory/product/{}".format(product["id"])).json()["inventory"]
        return product, inventory

    def _dates(self, start_offset, end_offset):
        return {
            "startDate": (self.today + timedelta(days=start_offset)).isoformat(),
            "endDate": (self.today + timedelta(days=end_offset)).isoformat(),
        }

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")
        self.assertEqual(response.json()["database"], "ok")

    def test_product_creation_opens_inventory(self):
        product, inventory = self._create_product()
        self.assertEqual(inventory["status"], "Newly Added")
        self.assertEqual(inventory["product_id"], product["id"])
        self.assertEqual(inventory["color_size_stock"], {"Red": {"S": 0, "M": 0}})

        missing = self.client.get("/inventory/product/999")
        self.assertEqual(missing.status_code, 200)
        self.assertIsNone(missing.json()["inventory"])

        self.assertEqual(self.client.get("/products/999").status_code, 404)

    def test_stock_adjustments(self):
        _, inventory = self._create_product()
        url = "/inventory/{}/adjustments".format(inventory["id"])

        response = self.client.post(url, json={"delta": 3, "size": "M", "color": "Red"})
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["stock"], 3)
        self.assertEqual(body["status"], "In Stock")

        response = self.client.post(url, json={"delta": -4, "size": "M", "color": "Red"})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"], "Stock cannot be reduced below zero!")
        self.assertEqual(response.json()["details"]["dimension"], "total")

        response = self.client.post(url, json={"delta": -1, "size": "S", "color": "Red"})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"], "Size S stock cannot be reduced below zero!")

        self.assertEqual(self.client.post(url, json={"delta": 0}).status_code, 400)
        self.assertEqual(
            self.client.post("/inventory/999/adjustments", json={"delta": 1}).status_code,
            404,
        )

        detail = self.client.get("/inventory/{}".format(inventory["id"])).json()
        self.assertEqual(detail["stock"], 3)
        self.assertEqual(detail["discrepancies"], [])

    def test_inventory_listing_and_reports(self):
        _, inventory = self._create_product()
        self.client.post(
            "/inventory/{}/adjustments".format(inventory["id"]),
            json={"delta": 2, "size": "S", "color": "Red"},
        )
        self.client.put("/inventory/{}/colors".format(inventory["id"]), json={"colors": ["Blue"]})

        listing = self.client.get("/inventory", params={"status": "In Stock"}).json()
        self.assertEqual(len(listing["items"]), 1)
        self.assertEqual(listing["counts"]["in_stock"], 1)
        self.assertEqual(self.client.get("/inventory", params={"status": "Sold"}).status_code, 400)

        query = self.client.get("/inventory/query", params={"color": "Red", "size": "S"}).json()
        self.assertEqual(query["total_quantity"], 2)
        self.assertEqual(self.client.get("/inventory/query").status_code, 400)

        report = self.client.get("/inventory/reports/color-size").json()
        self.assertIn({"color": "Blue", "size": "M", "total_quantity": 0, "product_count": 0}, report)

    def test_order_reductions(self):
        product, inventory = self._create_product()
        self.client.post(
            "/inventory/{}/adjustments".format(inventory["id"]),
            json={"delta": 2, "size": "S", "color": "Red"},
        )
        response = self.client.post(
            "/inventory/order-reductions",
            json={
                "line_items": [
                    {"product_id": product["id"], "quantity": 1, "size": "S", "color": "Red"},
                    {"product_id": product["id"], "quantity": 5, "size": "S", "color": "Red"},
                ]
            },
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["succeeded"], 1)
        self.assertEqual(body["failed"], 1)
        self.assertEqual(body["results"][1]["dimension"], "total")

    def test_inventory_delete_guard(self):
        product, inventory = self._create_product()
        self.assertEqual(self.client.delete("/inventory/{}".format(inventory["id"])).status_code, 409)
        self.assertEqual(self.client.delete("/products/{}".format(product["id"])).status_code, 204)
        self.assertEqual(self.client.get("/inventory/{}".format(inventory["id"])).status_code, 404)

    def test_discount_lifecycle(self):
        product, _ = self._create_product()
        payload = {"targetType": "Product", "target": str(product["id"]), "percentage": 20}

        reversed_range = dict(payload, **self._dates(5, 1))
        response = self.client.post("/discounts", json=reversed_range)
        self.assertEqual(response.status_code, 400)
        self.assertIn("endDate", response.json()["error"])

        response = self.client.post("/discounts", json=dict(payload, status="Inactive", **self._dates(-1, 5)))
        self.assertEqual(response.status_code, 201, response.text)
        discount = response.json()
        self.assertEqual(discount["status"], "Active")

        self.client.post("/discounts", json=dict(payload, percentage=50, **self._dates(3, 9)))

        listing = self.client.get("/discounts").json()
        self.assertEqual(listing["counts"]["active"], 1)
        self.assertEqual(listing["counts"]["future_plan"], 1)

        best = self.client.get("/discounts/product/{}".format(product["id"])).json()
        self.assertEqual(best["id"], discount["id"])

        bulk = self.client.post("/discounts/bulk", json={"product_ids": [product["id"]]}).json()
        self.assertEqual(bulk["count"], 1)
        self.assertEqual(self.client.post("/discounts/bulk", json={"product_ids": []}).status_code, 400)

        updated = self.client.put(
            "/discounts/{}".format(discount["id"]),
            json={"startDate": self._dates(2, 2)["startDate"], "endDate": self._dates(4, 4)["endDate"]},
        )
        self.assertEqual(updated.json()["status"], "Future Plan")

        widened = self.client.put("/discounts/{}".format(discount["id"]), json={"applyToAllProducts": True})
        self.assertEqual(widened.json()["target_type"], "All")
        narrowed = self.client.put(
            "/discounts/{}".format(discount["id"]),
            json={"targetType": "Product", "target": str(product["id"])},
        )
        self.assertEqual(narrowed.status_code, 200)
        self.assertEqual(narrowed.json()["target"], str(product["id"]))
        self.assertFalse(narrowed.json()["apply_to_all_products"])
        conflict = self.client.put(
            "/discounts/{}".format(discount["id"]),
            json={"targetType": "Category", "target": "Women", "applyToAllProducts": True},
        )
        self.assertEqual(conflict.status_code, 400)

        self.assertEqual(self.client.delete("/discounts/{}".format(discount["id"])).status_code, 204)
        self.assertEqual(self.client.get("/discounts/{}".format(discount["id"])).status_code, 404)

    def test_coupon_validation(self):
        payload = dict(code="Welcome10", discount=10, minOrderValue=100, **self._dates(-2, 2))
        self.assertEqual(self.client.post("/coupons", json=payload).status_code, 201)
        self.assertEqual(self.client.post("/coupons", json=payload).status_code, 409)

        ok = self.client.post("/coupons/validate", json={"code": "welcome10", "subtotal": 200})
        self.assertEqual(ok.status_code, 200)
        self.assertEqual(ok.json()["discount_amount"], 20.0)

        below = self.client.post("/coupons/validate", json={"code": "WELCOME10", "subtotal": 50})
        self.assertEqual(below.status_code, 400)

        unknown = self.client.post("/coupons/validate", json={"code": "NOPE", "subtotal": 50})
        self.assertEqual(unknown.status_code, 404)

        future = dict(code="LATER", discount=5, **self._dates(3, 6))
        self.assertEqual(self.client.post("/coupons", json=future).json()["status"], "Future")
        not_yet = self.client.post("/coupons/validate", json={"code": "later", "subtotal": 50})
        self.assertEqual(not_yet.status_code, 400)
        self.assertEqual(not_yet.json()["error"], "Coupon is not active yet.")

        listing = self.client.get("/coupons").json()
        self.assertEqual(listing["counts"], {"total": 2, "active": 1, "inactive": 0, "future": 1})
        future_only = self.client.get("/coupons", params={"status": "Future"}).json()
        self.assertEqual([item["code"] for item in future_only["items"]], ["LATER"])

        preview = self.client.get("/coupons/status-refresh").json()
        self.assertTrue(preview["dry_run"])
        self.assertEqual(preview["changes"], [])

    def test_api_key_guard(self):
        with mock.patch("storeadmin.core.security.load_api_keys", return_value={"secret"}):
            denied = self.client.post("/products", json={"name": "Scarf"})
            self.assertEqual(denied.status_code, 401)

            allowed = self.client.post(
                "/products",
                json={"name": "Scarf"},
                headers={"X-API-Key": "secret"},
            )
            self.assertEqual(allowed.status_code, 201)

            self.assertEqual(self.client.get("/products").status_code, 200)


if __name__ == "__main__":
    unittest.main()
