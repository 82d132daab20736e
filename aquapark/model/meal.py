# aquapark/model/meal.py
from ..extensions import db

class Meal(db.Model):
    __tablename__ = "meals"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    category = db.Column(db.String(120))
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    archived = db.Column(db.Boolean, nullable=False, default=False, index=True)

    def as_api(self):
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "price": float(self.price or 0),
            "archived": self.archived,
        }


class OrderMeal(db.Model):
    __tablename__ = "order_meals"
    __table_args__ = (
        db.UniqueConstraint("order_id", "meal_id", name="uq_order_meals_order_meal"),
        db.CheckConstraint("quantity >= 1", name="ck_order_meals_quantity_positive"),
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    meal_id = db.Column(db.Integer, db.ForeignKey("meals.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    price_at_order = db.Column(db.Numeric(12, 2), nullable=False)

    meal = db.relationship("Meal", lazy="joined")
    order = db.relationship("Order", back_populates="meals")

    def as_api(self):
        return {
            "meal_id": self.meal_id,
            "name": self.meal.name if self.meal else None,
            "quantity": self.quantity,
            "price_at_order": float(self.price_at_order or 0),
        }
