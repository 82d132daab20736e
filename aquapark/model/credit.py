# aquapark/model/credit.py
from datetime import datetime
from ..extensions import db

class CreditAccount(db.Model):
    __tablename__ = "credit_accounts"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(180), nullable=False, unique=True)
    balance = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    description = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class CreditTransaction(db.Model):
    """Credit ledger row; rows tied to an order go away with the order."""
    __tablename__ = "credit_transactions"

    id = db.Column(db.Integer, primary_key=True)
    credit_account_id = db.Column(db.Integer, db.ForeignKey("credit_accounts.id"), nullable=False, index=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    transaction_type = db.Column(db.String(32), nullable=False)  # initial_balance | top_up | ticket_sale ...
    description = db.Column(db.String(255))
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    account = db.relationship("CreditAccount", lazy="joined")
