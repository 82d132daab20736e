# aquapark/model/ticket.py
from ..extensions import db

TICKET_AVAILABLE = "available"
TICKET_SOLD = "sold"

class TicketType(db.Model):
    __tablename__ = "ticket_types"

    id = db.Column(db.Integer, primary_key=True)
    category = db.Column(db.String(120), nullable=False, index=True)
    subcategory = db.Column(db.String(120), nullable=False)
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    description = db.Column(db.String(255))
    archived = db.Column(db.Boolean, nullable=False, default=False, index=True)

    tickets = db.relationship("Ticket", back_populates="ticket_type", lazy="select")

    def as_api(self, available):
        return {
            "id": self.id,
            "category": self.category,
            "subcategory": self.subcategory,
            "price": float(self.price or 0),
            "description": self.description,
            "archived": self.archived,
            "available": available,
        }


class Ticket(db.Model):
    """One physical ticket. Sold tickets carry the order and the price they were sold at."""
    __tablename__ = "tickets"

    id = db.Column(db.Integer, primary_key=True)
    ticket_type_id = db.Column(db.Integer, db.ForeignKey("ticket_types.id"), nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default=TICKET_AVAILABLE, index=True)
    valid = db.Column(db.Boolean, nullable=False, default=True)
    sold_at = db.Column(db.DateTime)
    sold_price = db.Column(db.Numeric(12, 2))
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True, index=True)

    ticket_type = db.relationship("TicketType", back_populates="tickets", lazy="joined")
    order = db.relationship("Order", back_populates="tickets")

    def release(self):
        # back to inventory; the sold price snapshot goes with the sale
        self.status = TICKET_AVAILABLE
        self.order_id = None
        self.sold_at = None
        self.sold_price = None
