from datetime import datetime
from decimal import Decimal

import pytest
from flask_jwt_extended import create_access_token

from aquapark import create_app
from aquapark.config import TestConfig
from aquapark.extensions import db as _db
from aquapark.model import (
    Meal,
    Order,
    OrderMeal,
    Payment,
    Ticket,
    TicketType,
    User,
    TICKET_SOLD,
)


@pytest.fixture()
def app():
    """
    Fresh application on an in-memory SQLite database per test. The app
    context stays pushed for the whole test so fixtures and requests share it.
    """
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def db(app):
    return _db


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def users(db):
    admin = User(name="Mona", role="admin")
    accountant = User(name="Karim", role="accountant")
    cashier = User(name="Salma", role="cashier")
    db.session.add_all([admin, accountant, cashier])
    db.session.commit()
    return {"admin": admin, "accountant": accountant, "cashier": cashier}


def _headers(user):
    return {"Authorization": f"Bearer {create_access_token(identity=str(user.id))}"}


@pytest.fixture()
def auth(users):
    """Authorization headers per role."""
    return {role: _headers(u) for role, u in users.items()}


@pytest.fixture()
def catalog(db):
    adult = TicketType(category="Day Pass", subcategory="Adult", price=Decimal("50.00"))
    child = TicketType(category="Day Pass", subcategory="Child", price=Decimal("30.00"))
    retired = TicketType(category="Night Swim", subcategory="Adult", price=Decimal("80.00"), archived=True)
    burger = Meal(name="Burger", category="Grill", price=Decimal("20.00"))
    juice = Meal(name="Mango Juice", category="Drinks", price=Decimal("7.50"))
    db.session.add_all([adult, child, retired, burger, juice])
    db.session.commit()
    return {
        "adult": adult,
        "child": child,
        "retired": retired,
        "burger": burger,
        "juice": juice,
    }


@pytest.fixture()
def make_order(db, users):
    """
    Build an order the way the sale flow leaves it:
    make_order(tickets=[(ticket_type, n)], meals=[(meal, qty)], payments=[(method, amount)])
    Returns the order id.
    """
    def _make(tickets=(), meals=(), payments=(), user=None, created_at=None, description=None):
        order = Order(
            user_id=(user or users["cashier"]).id,
            created_at=created_at or datetime.utcnow(),
            description=description,
        )
        db.session.add(order)
        db.session.flush()

        gross = Decimal("0")
        for tt, n in tickets:
            for _ in range(n):
                db.session.add(Ticket(
                    ticket_type_id=tt.id,
                    status=TICKET_SOLD,
                    sold_at=order.created_at,
                    sold_price=tt.price,
                    order_id=order.id,
                ))
            gross += Decimal(tt.price) * n
        for meal, qty in meals:
            db.session.add(OrderMeal(
                order_id=order.id, meal_id=meal.id, quantity=qty, price_at_order=meal.price,
            ))
            gross += Decimal(meal.price) * qty

        discount = Decimal("0")
        for method, amount in payments:
            db.session.add(Payment(order_id=order.id, method=method, amount=Decimal(str(amount))))
            if method == "discount":
                discount += Decimal(str(amount))

        order.gross_total = gross
        order.total_amount = max(Decimal("0"), gross - discount)
        db.session.commit()
        return order.id

    return _make
