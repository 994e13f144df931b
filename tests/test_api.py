import requests

from sn_admin.services import invoice_client
from sn_admin.services.errors import BackendError


class InvoiceResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self.ok = status_code < 400
        self._body = body or {}
        self.text = text

    def json(self):
        return self._body


def test_ping(client):
    assert client.get("/ping").json() == {"ping": "pong"}


# === Pricing ===

def test_end_of_tenancy_quote(client):
    res = client.post("/api/end-of-tenancy/quote", json={
        "property_type": "house",
        "condition": "good",
        "bedrooms": 2,
        "bathrooms": 1,
        "additional_rooms": ["garage"],
    })
    assert res.status_code == 200
    assert res.json()["total_price"] == 354


def test_end_of_tenancy_quote_rejects_negative_rooms(client):
    res = client.post("/api/end-of-tenancy/quote", json={"property_type": "flat", "bedrooms": -1})
    assert res.status_code == 422


def test_end_of_tenancy_booking(client, db):
    res = client.post("/api/end-of-tenancy/bookings", json={
        "form": {"property_type": "flat", "condition": "well-maintained", "bedrooms": 1, "bathrooms": 1},
        "customer": 7,
        "date_time": "2026-11-20T09:00:00",
        "address": "3 Quay Lane",
        "postcode": "BS1 4AA",
    })
    assert res.status_code == 201
    body = res.json()
    assert body["total_cost"] == 220
    assert body["service_type"] == "End of Tenancy"
    assert body["email"] == "jordan@example.com"
    assert len(db.rows("bookings")) == 1


def test_cost_form_reduce(client):
    res = client.post("/api/cost-form/reduce", json={
        "state": {"hours": 3, "cost_per_hour": 20, "total_cost": 60},
        "field": "total_cost",
        "value": 75,
    })
    assert res.status_code == 200
    assert res.json()["total_cost"] == 75
    assert res.json()["total_cost_overridden"] is True

    bad = client.post("/api/cost-form/reduce", json={"state": {}, "field": "tip", "value": 5})
    assert bad.status_code == 422


# === Linen ===

def test_linen_adjust_over_stock_is_conflict(client):
    res = client.post("/api/linen/adjust", json={
        "usage": [{"product_id": "towel", "quantity": 3}],
        "product_id": "towel",
        "product_name": "Bath Towel",
        "inventory": [{"product_id": "towel", "clean_quantity": 5}],
        "delta": 3,
    })
    assert res.status_code == 409
    detail = res.json()["detail"]
    assert detail["available"] == 5
    assert detail["already_selected"] == 3
    assert detail["message"].startswith("Only 5 Bath Towel available")


def seed_towels(db, clean_quantity):
    db.seed("linen_inventory", {
        "id": 1, "customer_id": 7, "address_id": "addr-1", "product_id": "towel",
        "clean_quantity": clean_quantity, "dirty_quantity": 0, "in_use_quantity": 0,
    })


def test_linen_adjust_persists_to_booking(client, db, booking_row):
    db.seed("bookings", booking_row)
    seed_towels(db, 5)
    res = client.post("/api/linen/adjust", json={
        "usage": [{"product_id": "towel", "quantity": 3}],
        "product_id": "towel",
        "delta": 2,
        "booking_id": 101,
        "customer_id": 7,
        "address_id": "addr-1",
    })
    assert res.status_code == 200
    assert res.json()["total_items"] == 5
    assert db.rows("bookings")[0]["linen_used"] == [{"product_id": "towel", "quantity": 5, "product_name": ""}]


def test_linen_save_checks_stored_inventory(client, db, booking_row):
    db.seed("bookings", booking_row)
    seed_towels(db, 2)
    res = client.post("/api/linen/adjust", json={
        "product_id": "towel",
        "inventory": [{"product_id": "towel", "clean_quantity": 10}],
        "delta": 3,
        "booking_id": 101,
        "customer_id": 7,
        "address_id": "addr-1",
    })
    assert res.status_code == 409
    assert res.json()["detail"]["available"] == 2
    assert "linen_used" not in db.rows("bookings")[0]


def test_linen_save_needs_inventory_location(client, db, booking_row):
    db.seed("bookings", booking_row)
    res = client.post("/api/linen/set", json={
        "product_id": "towel",
        "inventory": [{"product_id": "towel", "clean_quantity": 10}],
        "quantity": 1,
        "booking_id": 101,
    })
    assert res.status_code == 422
    assert res.json()["detail"]["fields"] == ["customer_id", "address_id"]
    assert "linen_used" not in db.rows("bookings")[0]


def test_linen_set_requires_quantity(client):
    res = client.post("/api/linen/set", json={"product_id": "towel", "inventory": []})
    assert res.status_code == 422


# === Bookings ===

def test_create_booking_validation_error(client):
    res = client.post("/api/bookings", json={
        "customer": 7,
        "date_time": "2026-11-03T09:30:00",
        "address": "",
        "service_type": "Domestic",
    })
    assert res.status_code == 422
    assert res.json()["detail"]["fields"] == ["address"]


def test_booking_crud(client, db, booking_row):
    db.seed("bookings", booking_row)

    assert client.get("/api/bookings/101").json()["postcode"] == "SW1A 1AA"
    assert client.patch("/api/bookings/101", json={"postcode": "E1 6AN"}).json()["postcode"] == "E1 6AN"
    assert client.post("/api/bookings/101/cancel").json()["booking_status"] == "cancelled"
    assert client.delete("/api/bookings/101").status_code == 204
    assert client.get("/api/bookings/101").status_code == 404


def test_list_bookings(client, db, booking_row):
    db.seed("bookings", booking_row, {**booking_row, "id": 102, "payment_status": "Unpaid"})

    body = client.get("/api/bookings", params={"payment_status": "Unpaid"}).json()
    assert body["total"] == 1
    assert body["items"][0]["id"] == 102

    assert client.get("/api/bookings", params={"page_size": 500}).status_code == 422


def test_duplicate_and_assign(client, db, booking_row):
    db.seed("bookings", booking_row)

    dup = client.post("/api/bookings/101/duplicate", json={"date_time": "2026-11-09T10:00:00"})
    assert dup.status_code == 201
    assert dup.json()["payment_status"] == "Unpaid"

    assigned = client.post("/api/bookings/101/assign-cleaner", json={"cleaner": 3, "pay_method": "hourly"})
    assert assigned.json()["cleaner_pay"] == 48


def test_payment_status_endpoint(client, db, booking_row):
    db.seed("bookings", booking_row)

    ok = client.patch("/api/bookings/101/payment-status", json={"payment_status": "Authorized"})
    assert ok.json()["payment_status"] == "Authorized"

    bad = client.patch("/api/bookings/101/payment-status", json={"payment_status": "Pending"})
    assert bad.status_code == 422


def test_backend_constraint_error_is_user_message(client, db, booking_row):
    db.seed("bookings", booking_row)
    db.fail_when = lambda table, op, row: table == "bookings" and op == "update"

    res = client.patch("/api/bookings/101", json={"total_hours": 2})
    assert res.status_code == 400
    assert res.json()["detail"] == {"message": "One of the values is outside the allowed range.", "code": "23514"}


def test_bulk_endpoints(client, db, booking_row):
    res = client.post("/api/bookings/bulk-airbnb", json={
        "customer": 7,
        "address": "Flat 4, 9 Harbour Road",
        "postcode": "BN1 2AA",
        "dates": [{"date_time": "2026-11-10T11:00:00"}, {"date_time": "2026-11-11T11:00:00", "same_day": True}],
    })
    assert res.json()["succeeded"] == 2

    ids = res.json()["created_ids"]
    edit = client.post("/api/bookings/bulk-edit", json={"booking_ids": ids, "field": "payment_method", "value": "card"})
    assert edit.json() == {"succeeded": 2, "failed": 0, "created_ids": [], "errors": []}
    assert {r["payment_method"] for r in db.rows("bookings")} == {"Card"}


# === Outbound ===

def test_email_booking(client, db, booking_row):
    db.seed("bookings", booking_row)

    res = client.post("/api/bookings/101/email", json={"template": "invoice"})

    assert res.json() == {"sent": True, "template": "invoice"}
    name, payload = db.invocations[-1]
    assert name == "send-notification-email"
    assert payload["to"] == ["jordan@example.com"]
    assert "https://invoices.example/INV-1" in payload["html"]
    assert "£60.00" in payload["html"]


def test_email_without_address_is_skipped(client, db, booking_row):
    db.seed("bookings", {**booking_row, "email": None})
    assert client.post("/api/bookings/101/email", json={}).json()["sent"] is False
    assert db.invocations == []


def test_email_provider_failure_is_bad_gateway(client, db, booking_row):
    db.seed("bookings", booking_row)
    db.function_responses["send-notification-email"] = BackendError("500", "mail server down", status=500)

    res = client.post("/api/bookings/101/email", json={})
    assert res.status_code == 502


def test_invoice_created_and_sent(client, db, booking_row, monkeypatch):
    db.seed("bookings", {**booking_row, "invoice_id": None, "invoice_link": None})
    calls = []

    def fake_post(url, **kwargs):
        calls.append((url, kwargs.get("json")))
        if url.endswith("/invoices"):
            return InvoiceResponse(body={"id": "INV-77", "url": "https://invoices.example/INV-77"})
        return InvoiceResponse(body={"sent": True})

    monkeypatch.setattr(invoice_client.requests, "post", fake_post)

    res = client.post("/api/bookings/101/invoice", json={})

    assert res.status_code == 200
    assert res.json()["booking"]["invoice_id"] == "INV-77"
    assert res.json()["sent"] is True
    assert calls[0][1]["items"][0]["price"] == 60.0
    assert calls[1][0].endswith("/invoices/INV-77/send")
    assert db.rows("bookings")[0]["invoice_link"] == "https://invoices.example/INV-77"


def test_invoice_api_down(client, db, booking_row, monkeypatch):
    db.seed("bookings", {**booking_row, "invoice_id": None})

    def fake_post(url, **kwargs):
        raise requests.ConnectionError("timeout")

    monkeypatch.setattr(invoice_client.requests, "post", fake_post)
    assert client.post("/api/bookings/101/invoice", json={}).status_code == 502


def test_payment_link(client, db, booking_row):
    db.seed("bookings", booking_row)
    db.function_responses["stripe-send-payment-link"] = {"url": "https://pay.example/abc"}

    res = client.post("/api/bookings/101/payment-link", json={})

    assert res.json() == {"url": "https://pay.example/abc", "emailed": True}
    assert [name for name, _ in db.invocations] == ["stripe-send-payment-link", "send-notification-email"]
    assert "https://pay.example/abc" in db.invocations[-1][1]["html"]


def test_payment_link_needs_amount(client, db, booking_row):
    db.seed("bookings", {**booking_row, "total_cost": 0})
    res = client.post("/api/bookings/101/payment-link", json={})
    assert res.status_code == 422
    assert res.json()["detail"]["fields"] == ["total_cost"]
