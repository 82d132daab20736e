"""Order editing on the server: the all-or-nothing mutation, the cascading
delete and the date-range fetch used by the orders screen.

The mutation never trusts a client total. It starts from the order's current
line items, applies the diff against the ticket and meal tables and writes the
resulting gross and net totals. The payment list, however, is stored as sent:
reconciliation against the total is the edit session's job.
"""
import logging
from datetime import date, datetime, timedelta
from decimal import InvalidOperation

from ..extensions import db
from ..errors import InvalidPayload, NotFound, UnknownMeal, UnknownTicketType
from ..model import (
    CreditTransaction,
    Meal,
    Order,
    OrderMeal,
    Payment,
    Ticket,
    TicketType,
    TICKET_SOLD,
)
from ..model.payment import MAX_PAYMENTS, PAYMENT_METHODS, is_discount
from ..utils.money import D, ZERO, money_sum, round_money, to_float

log = logging.getLogger(__name__)


# ------------------------ payload parsing ------------------------

def _to_int(v, default=None):
    try:
        return int(v)
    except (TypeError, ValueError):
        return default

def _entries(payload, key, id_key, with_price=False):
    raw = payload.get(key) or []
    if not isinstance(raw, list):
        raise InvalidPayload(f"{key} must be a list")
    out = []
    for item in raw:
        if not isinstance(item, dict):
            raise InvalidPayload(f"{key} entries must be objects")
        ref = _to_int(item.get(id_key))
        qty = _to_int(item.get("quantity"), 0)
        if ref is None:
            raise InvalidPayload(f"{key}: {id_key} is required")
        if qty <= 0:
            continue
        entry = {id_key: ref, "quantity": qty}
        if with_price:
            entry["price"] = item.get("price")
        out.append(entry)
    return out

def _payments(payload):
    raw = payload.get("payments") or []
    if not isinstance(raw, list):
        raise InvalidPayload("payments must be a list")
    if len(raw) > MAX_PAYMENTS:
        raise InvalidPayload(f"Maximum {MAX_PAYMENTS} payment methods allowed per order")
    out = []
    for p in raw:
        if not isinstance(p, dict):
            raise InvalidPayload("payments entries must be objects")
        method = p.get("method")
        if method not in PAYMENT_METHODS:
            raise InvalidPayload(f"Unknown payment method: {method}")
        try:
            amount = round_money(D(p.get("amount")))
        except (InvalidOperation, ValueError, TypeError):
            raise InvalidPayload(f"Invalid payment amount: {p.get('amount')}")
        if not amount.is_finite() or amount < 0:
            raise InvalidPayload(f"Invalid payment amount: {p.get('amount')}")
        out.append({"method": method, "amount": amount})
    return out

def parse_update(payload):
    if not isinstance(payload, dict):
        raise InvalidPayload("JSON body required")
    order_id = _to_int(payload.get("order_id"))
    if not order_id:
        raise InvalidPayload("Order ID is required")
    return {
        "order_id": order_id,
        "added_tickets": _entries(payload, "addedTickets", "ticket_type_id"),
        "removed_tickets": _entries(payload, "removedTickets", "ticket_type_id"),
        "added_meals": _entries(payload, "addedMeals", "meal_id", with_price=True),
        "removed_meals": _entries(payload, "removedMeals", "meal_id"),
        "payments": _payments(payload),
    }


# ------------------------ mutation steps ------------------------

def _add_tickets(order, added, running):
    type_ids = {t["ticket_type_id"] for t in added}
    prices = {
        tt.id: D(tt.price)
        for tt in db.session.query(TicketType).filter(TicketType.id.in_(type_ids)).all()
    } if type_ids else {}
    now = datetime.utcnow()
    for entry in added:
        price = prices.get(entry["ticket_type_id"])
        if price is None:
            raise UnknownTicketType(
                f"Unknown ticket type {entry['ticket_type_id']}",
                ticket_type_id=entry["ticket_type_id"],
            )
        for _ in range(entry["quantity"]):
            db.session.add(Ticket(
                ticket_type_id=entry["ticket_type_id"],
                status=TICKET_SOLD,
                valid=True,
                sold_at=now,
                sold_price=price,
                order_id=order.id,
            ))
        running += price * entry["quantity"]
    return running

def _remove_tickets(order, removed, running):
    report = {}
    for entry in removed:
        rows = (
            db.session.query(Ticket)
            .filter(
                Ticket.order_id == order.id,
                Ticket.ticket_type_id == entry["ticket_type_id"],
                Ticket.status == TICKET_SOLD,
            )
            .order_by(Ticket.id.asc())
            .limit(entry["quantity"])
            .all()
        )
        # removed units are deleted; only a whole-order delete restocks tickets
        for row in rows:
            running -= D(row.sold_price or ZERO)
            db.session.delete(row)
        db.session.flush()

        r = report.setdefault(entry["ticket_type_id"], {
            "ticket_type_id": entry["ticket_type_id"], "requested": 0, "removed": 0,
        })
        r["requested"] += entry["quantity"]
        r["removed"] += len(rows)
        if len(rows) < entry["quantity"]:
            log.warning(
                "order %s: asked to remove %d tickets of type %s, only %d sold",
                order.id, entry["quantity"], entry["ticket_type_id"], len(rows),
            )
    return running, list(report.values())

def _meal_price(entry, catalog, trust_client_price):
    if trust_client_price and entry.get("price") is not None:
        try:
            price = round_money(D(entry["price"]))
        except (InvalidOperation, ValueError, TypeError):
            raise InvalidPayload(f"Invalid meal price: {entry['price']}")
        if price.is_finite() and price >= 0:
            return price
        raise InvalidPayload(f"Invalid meal price: {entry['price']}")
    meal = catalog.get(entry["meal_id"])
    if meal is None:
        raise UnknownMeal(f"Unknown meal {entry['meal_id']}", meal_id=entry["meal_id"])
    return D(meal.price)

def _add_meals(order, added, running, trust_client_price):
    meal_ids = {m["meal_id"] for m in added}
    catalog = {
        m.id: m for m in db.session.query(Meal).filter(Meal.id.in_(meal_ids)).all()
    } if meal_ids else {}
    for entry in added:
        line = (
            db.session.query(OrderMeal)
            .filter_by(order_id=order.id, meal_id=entry["meal_id"])
            .first()
        )
        if line is not None:
            price = D(line.price_at_order)
            line.quantity += entry["quantity"]
        else:
            price = _meal_price(entry, catalog, trust_client_price)
            db.session.add(OrderMeal(
                order_id=order.id,
                meal_id=entry["meal_id"],
                quantity=entry["quantity"],
                price_at_order=price,
            ))
        db.session.flush()
        running += price * entry["quantity"]
    return running

def _remove_meals(order, removed, running):
    for entry in removed:
        line = (
            db.session.query(OrderMeal)
            .filter_by(order_id=order.id, meal_id=entry["meal_id"])
            .first()
        )
        if line is None:
            continue
        taken = min(entry["quantity"], line.quantity)
        running -= D(line.price_at_order) * taken
        if line.quantity - entry["quantity"] <= 0:
            db.session.delete(line)
        else:
            line.quantity -= entry["quantity"]
        db.session.flush()
    return running

def _replace_payments(order, payments):
    db.session.query(Payment).filter(Payment.order_id == order.id).delete(synchronize_session=False)
    for p in payments:
        db.session.add(Payment(order_id=order.id, method=p["method"], amount=p["amount"]))


def update_order(payload, trust_client_meal_price=False):
    """
    Apply an edit diff to one order in a single transaction.

    payload:
      {order_id, addedTickets, removedTickets, addedMeals, removedMeals, payments}

    Returns {order_id, total_amount, gross_total, removed_tickets}. Raises an
    OrderError subclass (or lets a database error through) after rolling back.
    """
    req = parse_update(payload)
    order_id = req["order_id"]
    log.debug("order %s: received", order_id)

    try:
        order = (
            db.session.query(Order)
            .filter(Order.id == order_id)
            .with_for_update()
            .first()
        )
        if order is None:
            raise NotFound("Order not found", order_id=order_id)
        log.debug("order %s: validated", order_id)

        running = order.lines_gross()
        running = _add_tickets(order, req["added_tickets"], running)
        running, removed_report = _remove_tickets(order, req["removed_tickets"], running)
        log.debug("order %s: tickets applied", order_id)

        running = _add_meals(order, req["added_meals"], running, trust_client_meal_price)
        running = _remove_meals(order, req["removed_meals"], running)
        log.debug("order %s: meals applied", order_id)

        payments = req["payments"]
        discount_source = payments or [
            {"method": p.method, "amount": D(p.amount)} for p in order.payments
        ]
        gross = round_money(running)
        discount = money_sum(p["amount"] for p in discount_source if is_discount(p["method"]))
        net = max(ZERO, round_money(gross - discount))
        order.gross_total = gross
        order.total_amount = net
        log.debug("order %s: totals gross=%s net=%s", order_id, gross, net)

        if payments:
            _replace_payments(order, payments)
            log.debug("order %s: payments replaced (%d)", order_id, len(payments))

        db.session.commit()
    except Exception:
        db.session.rollback()
        log.info("order %s: rolled back", order_id)
        raise

    log.info("order %s updated: gross=%s net=%s", order_id, gross, net)
    return {
        "order_id": order_id,
        "total_amount": to_float(net),
        "gross_total": to_float(gross),
        "removed_tickets": removed_report,
    }


# ------------------------ delete ------------------------

def delete_order(order_id):
    """Delete an order; its tickets go back to inventory instead of being dropped."""
    try:
        order = (
            db.session.query(Order)
            .filter(Order.id == order_id)
            .with_for_update()
            .first()
        )
        if order is None:
            raise NotFound("Order not found", order_id=order_id)
        snapshot = {
            "id": order.id,
            "totalAmount": to_float(order.total_amount or ZERO),
            "createdAt": order.created_at.isoformat() if order.created_at else None,
        }

        db.session.query(Payment).filter(Payment.order_id == order.id).delete(synchronize_session=False)
        db.session.query(OrderMeal).filter(OrderMeal.order_id == order.id).delete(synchronize_session=False)
        released = 0
        for t in db.session.query(Ticket).filter(Ticket.order_id == order.id).all():
            t.release()
            released += 1
        db.session.query(CreditTransaction).filter(
            CreditTransaction.order_id == order.id
        ).delete(synchronize_session=False)
        db.session.flush()
        db.session.expire(order)
        db.session.delete(order)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    log.info("order %s deleted, %d tickets released", order_id, released)
    return snapshot


# ------------------------ fetch ------------------------

def _parse_day(value, name):
    if not value:
        raise InvalidPayload(f"{name} is required")
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidPayload(f"{name} must be YYYY-MM-DD")

def orders_between(start, end):
    """Orders created on any day from start to end inclusive, newest first."""
    start_day = _parse_day(start, "startDate")
    end_day = _parse_day(end, "endDate")
    q = (
        db.session.query(Order)
        .filter(Order.created_at >= datetime.combine(start_day, datetime.min.time()))
        # end is inclusive for the whole day
        .filter(Order.created_at < datetime.combine(end_day, datetime.min.time()) + timedelta(days=1))
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return [o.as_api() for o in q.all()]

def orders_on(day):
    return orders_between(day, day)
