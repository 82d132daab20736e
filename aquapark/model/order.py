from datetime import datetime
from ..extensions import db
from ..utils.money import round_money, to_float, ZERO
from .ticket import TICKET_SOLD

class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    description = db.Column(db.String(255))

    # Money snapshot
    gross_total = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)  # net of discounts

    user = db.relationship("User", back_populates="orders", lazy="joined")
    tickets = db.relationship(
        "Ticket",
        back_populates="order",
        lazy="select",
        order_by="Ticket.id.asc()",
    )
    meals = db.relationship(
        "OrderMeal",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="select",
        order_by="OrderMeal.id.asc()",
    )
    payments = db.relationship(
        "Payment",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="select",
        order_by="Payment.id.asc()",
    )

    def sold_tickets(self):
        return [t for t in self.tickets if t.status == TICKET_SOLD]

    def ticket_summary(self):
        """Sold tickets grouped by (type, sold price) with a quantity count."""
        groups = {}
        for t in self.sold_tickets():
            key = (t.ticket_type_id, round_money(t.sold_price or ZERO))
            row = groups.get(key)
            if row is None:
                tt = t.ticket_type
                row = groups[key] = {
                    "ticket_type_id": t.ticket_type_id,
                    "category": tt.category if tt else None,
                    "subcategory": tt.subcategory if tt else None,
                    "sold_price": to_float(key[1]),
                    "quantity": 0,
                }
            row["quantity"] += 1
        return list(groups.values())

    def lines_gross(self):
        tickets = sum((t.sold_price or ZERO for t in self.sold_tickets()), ZERO)
        meals = sum((m.price_at_order * m.quantity for m in self.meals), ZERO)
        return round_money(tickets + meals)

    def as_api(self):
        return {
            "order_id": self.id,
            "user_id": self.user_id,
            "user_name": self.user.name if self.user else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "gross_total": float(self.gross_total or 0),
            "total_amount": float(self.total_amount or 0),
            "description": self.description,
            "tickets": self.ticket_summary(),
            "meals": [m.as_api() for m in self.meals],
            "payments": [p.as_api() for p in self.payments],
        }
