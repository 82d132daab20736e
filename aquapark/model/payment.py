# aquapark/model/payment.py
from ..extensions import db

CASH = "cash"
VISA = "visa"
VODAFONE_CASH = "vodafone_cash"
POSTPONED = "postponed"
DISCOUNT = "discount"
AHLY_MASR = "الاهلي و مصر"
OTHER = "OTHER"
CREDIT = "CREDIT"

PAYMENT_METHODS = (CASH, VISA, VODAFONE_CASH, POSTPONED, DISCOUNT, AHLY_MASR, OTHER, CREDIT)

# offered in the edit screen; credit is settled through the credit ledger
SELECTABLE_METHODS = (VISA, CASH, VODAFONE_CASH, POSTPONED, DISCOUNT, AHLY_MASR, OTHER)

MAX_PAYMENTS = 5

_LABELS = {
    VODAFONE_CASH: "Vodafone Cash",
    AHLY_MASR: "الأهلي و مصر",
    OTHER: "Other",
    CREDIT: "Credit",
    POSTPONED: "Postponed",
}

def method_label(method: str) -> str:
    if method in _LABELS:
        return _LABELS[method]
    return method[:1].upper() + method[1:]

def method_options(methods=SELECTABLE_METHODS):
    return [{"value": m, "label": method_label(m)} for m in methods]

def is_discount(method) -> bool:
    return method == DISCOUNT


class Payment(db.Model):
    __tablename__ = "payments"
    __table_args__ = (
        db.CheckConstraint("amount >= 0", name="ck_payments_amount_non_negative"),
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    method = db.Column(db.String(32), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    order = db.relationship("Order", back_populates="payments")

    def as_api(self):
        return {"method": self.method, "amount": float(self.amount or 0)}
