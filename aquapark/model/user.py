# --- aquapark/model/user.py ---

from ..extensions import db

# roles: cashier, accountant, admin
ROLE_LEVEL = {"cashier": 1, "accountant": 2, "admin": 3}

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(180), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False, default="")
    role = db.Column(db.String(50), nullable=False, default="cashier", index=True)

    orders = db.relationship("Order", back_populates="user", lazy="select")
