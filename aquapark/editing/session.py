"""
Working copy of one order while an operator edits it.

The session keeps ticket and meal lines, the payment list and the derived
totals consistent after every call, and records the diff the server needs to
replay the edit. It never talks to the database; `save` hands the diff to an
API client.

    gross = sum(ticket price * qty) + sum(meal price * qty)
    net   = max(0, gross - sum(discount payments))

Payments reconcile when every entry, discounts included, adds up to net
within a cent. The remaining amount offered for a new entry counts only the
non-discount entries.
"""
from __future__ import annotations

import copy
import logging
from collections.abc import Mapping

from ..model.payment import CASH, MAX_PAYMENTS, is_discount
from ..utils.money import ZERO, CENT, money_sum, parse_money, round_money, to_float
from .catalog import CatalogSnapshot
from .errors import (
    ApiError,
    DiscountExceedsGross,
    EmptyOrder,
    InvalidSelection,
    LastPaymentRequired,
    LimitExceeded,
    NegativeTotal,
    NoChanges,
    NotReconciled,
    SaveFailed,
    SaveInProgress,
    SessionClosed,
    TooManyPayments,
)

log = logging.getLogger(__name__)

MAX_TICKETS_PER_TYPE = 50
MAX_MEALS_PER_TYPE = 20


def _payment(p) -> dict:
    return {"method": p.get("method") or CASH, "amount": parse_money(p.get("amount"))}

def _payment_key(payments) -> list:
    return [(p["method"], str(round_money(p["amount"]))) for p in payments]


class OrderEditSession:
    def __init__(self, order: Mapping, catalog: CatalogSnapshot | None = None):
        order = copy.deepcopy(dict(order))
        self.catalog = catalog or CatalogSnapshot()
        self.order_id = order.get("order_id", order.get("id"))
        self.order = order

        self.tickets = [
            {
                "ticket_type_id": t["ticket_type_id"],
                "category": t.get("category"),
                "subcategory": t.get("subcategory"),
                "sold_price": parse_money(t.get("sold_price")),
                "quantity": int(t.get("quantity") or 1),
            }
            for t in order.get("tickets") or []
        ]
        self.meals = [
            {
                "meal_id": m["meal_id"],
                "name": m.get("name"),
                "price_at_order": parse_money(m.get("price_at_order")),
                "quantity": int(m.get("quantity") or 1),
            }
            for m in order.get("meals") or []
        ]

        self.added_tickets: list[dict] = []
        self.removed_tickets: list[dict] = []
        self.added_meals: list[dict] = []
        self.removed_meals: list[dict] = []
        self.warnings: list = []
        self.closed = False
        self.saving = False

        self.payments = [_payment(p) for p in order.get("payments") or []]
        self.gross_total = ZERO
        self.total_amount = ZERO
        self._refresh_totals()
        if not self.payments:
            self.payments = [{"method": CASH, "amount": self.total_amount}]
        self.original_payments = copy.deepcopy(self.payments)

    # ------------------------ totals ------------------------

    def _lines_gross(self):
        ticket_total = money_sum(t["sold_price"] * t["quantity"] for t in self.tickets)
        meal_total = money_sum(m["price_at_order"] * m["quantity"] for m in self.meals)
        return round_money(ticket_total + meal_total)

    @staticmethod
    def _discount(payments):
        return money_sum(p["amount"] for p in payments if is_discount(p["method"]))

    def _refresh_totals(self):
        self.gross_total = self._lines_gross()
        self.total_amount = max(ZERO, round_money(self.gross_total - self._discount(self.payments)))

    def _auto_adjust(self):
        # a lone non-discount payment follows the net total
        others = [p for p in self.payments if not is_discount(p["method"])]
        if len(others) == 1:
            others[0]["amount"] = self.total_amount

    def recompute(self):
        """Re-derive gross and net from the current lines and payments."""
        self._refresh_totals()
        return self.total_amount

    def _after_line_change(self):
        self._refresh_totals()
        self._auto_adjust()

    @property
    def discount_amount(self):
        return self._discount(self.payments)

    @property
    def paid_amount(self):
        return money_sum(p["amount"] for p in self.payments if not is_discount(p["method"]))

    @property
    def payments_total(self):
        return money_sum(p["amount"] for p in self.payments)

    @property
    def difference(self):
        return round_money(self.payments_total - self.total_amount)

    @property
    def is_reconciled(self) -> bool:
        return abs(self.payments_total - self.total_amount) < CENT

    @property
    def has_changes(self) -> bool:
        if self.added_tickets or self.removed_tickets or self.added_meals or self.removed_meals:
            return True
        return _payment_key(self.payments) != _payment_key(self.original_payments)

    @property
    def can_commit(self) -> bool:
        return not self.closed and not self.saving and self.is_reconciled and self.has_changes

    def _check_open(self):
        if self.closed:
            raise SessionClosed("This edit session has been closed")

    # ------------------------ tickets ------------------------

    def _resolve_ticket_type(self, ticket_type):
        if isinstance(ticket_type, Mapping):
            tid = ticket_type.get("id", ticket_type.get("ticket_type_id"))
            found = self.catalog.ticket_type(tid) or ticket_type
        else:
            tid = ticket_type
            found = self.catalog.ticket_type(tid)
        if tid is None or found is None:
            raise InvalidSelection("Please select a ticket type")
        return tid, found

    def add_ticket(self, ticket_type):
        self._check_open()
        tid, tt = self._resolve_ticket_type(ticket_type)
        price = parse_money(tt.get("price", tt.get("sold_price")))

        held = sum(t["quantity"] for t in self.tickets if t["ticket_type_id"] == tid)
        if held >= MAX_TICKETS_PER_TYPE:
            raise LimitExceeded(f"Maximum {MAX_TICKETS_PER_TYPE} tickets of the same type allowed")

        # units sold at an older price stay on their own line
        line = next(
            (t for t in self.tickets if t["ticket_type_id"] == tid and t["sold_price"] == price),
            None,
        )
        if line is None:
            self.tickets.append({
                "ticket_type_id": tid,
                "category": tt.get("category"),
                "subcategory": tt.get("subcategory"),
                "sold_price": price,
                "quantity": 1,
            })
        else:
            line["quantity"] += 1

        self.added_tickets.append({"ticket_type_id": tid, "quantity": 1})
        self._after_line_change()
        log.debug("order %s: ticket type %s added", self.order_id, tid)

    def remove_ticket(self, ticket_type_id):
        self._check_open()
        idx = next(
            (i for i, t in enumerate(self.tickets) if t["ticket_type_id"] == ticket_type_id),
            None,
        )
        if idx is None:
            raise InvalidSelection(f"Ticket type {ticket_type_id} is not on this order")

        if self.tickets[idx]["quantity"] > 1:
            self.tickets[idx]["quantity"] -= 1
        else:
            del self.tickets[idx]

        self.removed_tickets.append({"ticket_type_id": ticket_type_id, "quantity": 1})
        self._after_line_change()
        log.debug("order %s: ticket type %s removed", self.order_id, ticket_type_id)

    # ------------------------ meals ------------------------

    def _resolve_meal(self, meal):
        if isinstance(meal, Mapping):
            mid = meal.get("id", meal.get("meal_id"))
            found = self.catalog.meal(mid) or meal
        else:
            mid = meal
            found = self.catalog.meal(mid)
        if mid is None or found is None:
            raise InvalidSelection("Please select a meal")
        return mid, found

    def add_meal(self, meal):
        self._check_open()
        mid, m = self._resolve_meal(meal)

        line = next((x for x in self.meals if x["meal_id"] == mid), None)
        if line is not None:
            if line["quantity"] >= MAX_MEALS_PER_TYPE:
                raise LimitExceeded(f"Maximum {MAX_MEALS_PER_TYPE} meals of the same type allowed")
            line["quantity"] += 1
            price = line["price_at_order"]
        else:
            price = parse_money(m.get("price", m.get("price_at_order")))
            self.meals.append({
                "meal_id": mid,
                "name": m.get("name"),
                "price_at_order": price,
                "quantity": 1,
            })

        self.added_meals.append({"meal_id": mid, "quantity": 1, "price": price})
        self._after_line_change()
        log.debug("order %s: meal %s added", self.order_id, mid)

    def remove_meal(self, meal_id):
        self._check_open()
        idx = next((i for i, m in enumerate(self.meals) if m["meal_id"] == meal_id), None)
        if idx is None:
            raise InvalidSelection(f"Meal {meal_id} is not on this order")

        if self.meals[idx]["quantity"] > 1:
            self.meals[idx]["quantity"] -= 1
        else:
            del self.meals[idx]

        self.removed_meals.append({"meal_id": meal_id, "quantity": 1})
        self._after_line_change()
        log.debug("order %s: meal %s removed", self.order_id, meal_id)

    # ------------------------ payments ------------------------

    def _payment_at(self, index):
        if not isinstance(index, int) or not 0 <= index < len(self.payments):
            raise InvalidSelection(f"No payment at position {index}")
        return self.payments[index]

    def change_payment_method(self, index, method):
        self._check_open()
        entry = self._payment_at(index)
        if method not in self.catalog.method_values:
            raise InvalidSelection(f"Unknown payment method: {method}")
        crossed = is_discount(entry["method"]) != is_discount(method)
        entry["method"] = method
        if crossed:
            self.recompute()

    def change_payment_amount(self, index, amount):
        """
        Set one payment's amount. Bad input counts as 0. A discount larger
        than the gross is cut down to the gross and a DiscountExceedsGross
        warning is returned (and kept in `warnings`). If the discounts would
        push the net below zero nothing changes and NegativeTotal is raised.
        """
        self._check_open()
        entry = self._payment_at(index)
        value = round_money(parse_money(amount))
        gross = self._lines_gross()

        warning = None
        if is_discount(entry["method"]) and value > gross:
            warning = DiscountExceedsGross(
                f"Discount amount cannot exceed gross total of {to_float(gross):.2f}"
            )
            value = gross

        candidate = [dict(p) for p in self.payments]
        candidate[index]["amount"] = value
        if round_money(gross - self._discount(candidate)) < 0:
            raise NegativeTotal("Total discount cannot exceed gross amount")

        entry["amount"] = value
        self._refresh_totals()
        if warning is not None:
            self.warnings.append(warning)
            log.info("order %s: %s", self.order_id, warning.message)
        return warning

    def add_payment(self):
        self._check_open()
        if len(self.payments) >= MAX_PAYMENTS:
            raise TooManyPayments(f"Maximum {MAX_PAYMENTS} payment methods allowed per order")
        remaining = max(ZERO, round_money(self.total_amount - self.paid_amount))
        entry = {"method": CASH, "amount": remaining}
        self.payments.append(entry)
        return entry

    def remove_payment(self, index):
        self._check_open()
        if len(self.payments) <= 1:
            raise LastPaymentRequired("At least one payment method is required")
        self._payment_at(index)
        removed = self.payments.pop(index)
        if is_discount(removed["method"]):
            self.recompute()
        return removed

    # ------------------------ commit ------------------------

    def validate(self):
        """Raise the first reason this session cannot be saved."""
        self._check_open()
        if self.saving:
            raise SaveInProgress("A save for this order is already in progress")
        if not self.is_reconciled:
            raise NotReconciled(
                f"Payment total ({to_float(self.payments_total):.2f}) must match order total "
                f"({to_float(self.total_amount):.2f}). Difference: {abs(to_float(self.difference)):.2f}"
            )
        if not self.has_changes:
            raise NoChanges("No changes detected. Please make changes before saving.")
        if not self.tickets and not self.meals:
            raise EmptyOrder("Order must contain at least one ticket or meal")

    def payload(self) -> dict:
        return {
            "order_id": self.order_id,
            "addedTickets": [dict(t) for t in self.added_tickets],
            "removedTickets": [dict(t) for t in self.removed_tickets],
            "addedMeals": [
                {"meal_id": m["meal_id"], "quantity": m["quantity"], "price": to_float(m["price"])}
                for m in self.added_meals
            ],
            "removedMeals": [dict(m) for m in self.removed_meals],
            "payments": [
                {"method": p["method"], "amount": to_float(p["amount"])} for p in self.payments
            ],
        }

    def save(self, client):
        """
        Send the diff through `client.update_order`. On success the session
        closes and the server's answer is returned; on failure it stays open
        and SaveFailed carries the server's message.
        """
        self.validate()
        self.saving = True
        try:
            result = client.update_order(self.payload())
        except ApiError as e:
            log.warning("order %s: save failed: %s", self.order_id, e.message)
            raise SaveFailed(e.message, status_code=e.status_code) from e
        finally:
            self.saving = False
        self.closed = True
        log.info("order %s saved", self.order_id)
        return result
