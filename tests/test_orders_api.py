from datetime import datetime, timedelta
from decimal import Decimal

from aquapark.model import (
    CreditAccount,
    CreditTransaction,
    Order,
    OrderMeal,
    Payment,
    Ticket,
    TICKET_AVAILABLE,
)


def test_health(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.get_json()["ok"] is True


def test_requests_need_a_token(client, app):
    r = client.get("/api/orders/range-report", query_string={"startDate": "2025-01-01", "endDate": "2025-01-02"})
    assert r.status_code == 401


def test_range_report_shape(client, auth, catalog, make_order):
    adult, burger = catalog["adult"], catalog["burger"]
    oid = make_order(
        tickets=[(adult, 2), (catalog["child"], 1)],
        meals=[(burger, 1)],
        payments=[("cash", 150)],
        description="family",
    )
    today = datetime.utcnow().date().isoformat()

    r = client.get(
        "/api/orders/range-report",
        query_string={"startDate": today, "endDate": today},
        headers=auth["cashier"],
    )

    assert r.status_code == 200
    [order] = r.get_json()
    assert order["order_id"] == oid
    assert order["user_name"] == "Salma"
    assert order["total_amount"] == 150.0
    assert order["description"] == "family"
    by_type = {t["ticket_type_id"]: t for t in order["tickets"]}
    assert by_type[adult.id]["quantity"] == 2
    assert by_type[adult.id]["sold_price"] == 50.0
    assert by_type[adult.id]["subcategory"] == "Adult"
    assert order["meals"] == [{"meal_id": burger.id, "name": "Burger", "quantity": 1, "price_at_order": 20.0}]
    assert order["payments"] == [{"method": "cash", "amount": 150.0}]


def test_range_report_is_inclusive_and_newest_first(client, auth, catalog, make_order):
    child = catalog["child"]
    day = datetime(2025, 7, 10, 9, 0)
    older = make_order(tickets=[(child, 1)], payments=[("cash", 30)], created_at=day)
    newer = make_order(tickets=[(child, 1)], payments=[("cash", 30)], created_at=day + timedelta(days=1, hours=14))
    make_order(tickets=[(child, 1)], payments=[("cash", 30)], created_at=day + timedelta(days=3))

    r = client.get(
        "/api/orders/range-report",
        query_string={"startDate": "2025-07-10", "endDate": "2025-07-11"},
        headers=auth["cashier"],
    )
    assert [o["order_id"] for o in r.get_json()] == [newer, older]

    r = client.get("/api/orders/day-report", query_string={"date": "2025-07-10"}, headers=auth["cashier"])
    assert [o["order_id"] for o in r.get_json()] == [older]


def test_range_report_requires_both_dates(client, auth):
    r = client.get("/api/orders/range-report", query_string={"startDate": "2025-07-10"}, headers=auth["cashier"])
    assert r.status_code == 400
    assert r.get_json()["status"] is False

    r = client.get(
        "/api/orders/range-report",
        query_string={"startDate": "10/07/2025", "endDate": "2025-07-11"},
        headers=auth["cashier"],
    )
    assert r.status_code == 400


def test_payment_methods(client, auth):
    r = client.get("/api/orders/payment-methods", headers=auth["cashier"])
    methods = {m["value"]: m["label"] for m in r.get_json()}
    assert methods["cash"] == "Cash"
    assert methods["vodafone_cash"] == "Vodafone Cash"
    assert methods["OTHER"] == "Other"
    assert "discount" in methods
    assert "CREDIT" not in methods


def test_update_order(client, auth, catalog, make_order):
    adult = catalog["adult"]
    oid = make_order(tickets=[(adult, 1)], payments=[("cash", 50)])

    r = client.put("/api/orders/update", json={
        "order_id": oid,
        "addedTickets": [{"ticket_type_id": adult.id, "quantity": 1}],
        "removedTickets": [],
        "addedMeals": [],
        "removedMeals": [],
        "payments": [{"method": "cash", "amount": 100}],
    }, headers=auth["accountant"])

    assert r.status_code == 200
    body = r.get_json()
    assert body["message"] == "Order updated successfully"
    assert body["order_id"] == oid
    assert body["total_amount"] == 100.0
    assert r.headers["X-Request-ID"]


def test_cashiers_cannot_edit_or_delete(client, auth, catalog, make_order):
    oid = make_order(tickets=[(catalog["adult"], 1)], payments=[("cash", 50)])

    r = client.put("/api/orders/update", json={"order_id": oid, "payments": []}, headers=auth["cashier"])
    assert r.status_code == 403
    r = client.delete(f"/api/orders/{oid}", headers=auth["cashier"])
    assert r.status_code == 403


def test_update_errors(client, auth, catalog, make_order):
    oid = make_order(tickets=[(catalog["adult"], 1)], payments=[("cash", 50)])

    r = client.put("/api/orders/update", json={"payments": []}, headers=auth["admin"])
    assert r.status_code == 400
    assert r.get_json()["message"] == "Order ID is required"

    r = client.put("/api/orders/update", json={"order_id": 999}, headers=auth["admin"])
    assert r.status_code == 404
    assert r.get_json()["message"] == "Order not found"

    r = client.put("/api/orders/update", json={
        "order_id": oid,
        "addedTickets": [{"ticket_type_id": 424242, "quantity": 1}],
        "payments": [{"method": "cash", "amount": 100}],
    }, headers=auth["admin"])
    assert r.status_code == 422
    assert r.get_json()["ticket_type_id"] == 424242

    payments = Payment.query.filter_by(order_id=oid).all()
    assert [(p.method, p.amount) for p in payments] == [("cash", Decimal("50.00"))]


def test_delete_order_cascades(client, auth, db, catalog, make_order):
    adult, burger = catalog["adult"], catalog["burger"]
    oid = make_order(tickets=[(adult, 2)], meals=[(burger, 1)], payments=[("discount", 20), ("cash", 100)])
    account = CreditAccount(name="Hotel Nile", balance=Decimal("500"))
    db.session.add(account)
    db.session.flush()
    db.session.add(CreditTransaction(
        credit_account_id=account.id, amount=Decimal("-100"), transaction_type="ticket_sale", order_id=oid,
    ))
    db.session.commit()
    assert Ticket.query.filter_by(status=TICKET_AVAILABLE).count() == 0

    r = client.delete(f"/api/orders/{oid}", headers=auth["accountant"])

    assert r.status_code == 200
    body = r.get_json()
    assert body["success"] is True
    assert body["deletedOrder"]["id"] == oid
    assert body["deletedOrder"]["totalAmount"] == 80.0

    assert db.session.get(Order, oid) is None
    assert Payment.query.filter_by(order_id=oid).count() == 0
    assert OrderMeal.query.filter_by(order_id=oid).count() == 0
    assert CreditTransaction.query.filter_by(order_id=oid).count() == 0
    assert Ticket.query.filter_by(status=TICKET_AVAILABLE).count() == 2

    r = client.get("/api/tickets/ticket-types", headers=auth["admin"])
    counts = {t["id"]: t["available"] for t in r.get_json()}
    assert counts[adult.id] == 2


def test_delete_unknown_order(client, auth):
    r = client.delete("/api/orders/31337", headers=auth["admin"])
    assert r.status_code == 404


def test_catalog_archived_filter_by_role(client, auth, catalog):
    r = client.get("/api/tickets/ticket-types", headers=auth["cashier"])
    assert {t["subcategory"] for t in r.get_json()} == {"Adult", "Child"}
    assert all(not t["archived"] for t in r.get_json())

    r = client.get("/api/tickets/ticket-types", headers=auth["accountant"])
    assert len(r.get_json()) == 3

    r = client.get("/api/tickets/ticket-types", query_string={"archived": "true"}, headers=auth["cashier"])
    assert [t["id"] for t in r.get_json()] == [catalog["retired"].id]

    r = client.get("/api/meals", headers=auth["cashier"])
    assert [m["name"] for m in r.get_json()] == ["Burger", "Mango Juice"]
