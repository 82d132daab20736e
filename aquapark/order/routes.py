# aquapark/order/routes.py
from flask import current_app, jsonify, request
from flask_jwt_extended import jwt_required

from ..model.payment import method_options
from ..services import order_service
from ..utils.api import ok
from ..utils.decorators import role_at_least
from . import bp


@bp.get("/range-report")
@jwt_required()
def range_report():
    """
    Query params:
      - startDate=YYYY-MM-DD
      - endDate=YYYY-MM-DD (inclusive)
    """
    orders = order_service.orders_between(
        request.args.get("startDate"), request.args.get("endDate")
    )
    return jsonify(orders)

@bp.get("/day-report")
@jwt_required()
def day_report():
    return jsonify(order_service.orders_on(request.args.get("date")))

@bp.get("/payment-methods")
@jwt_required()
def payment_methods():
    return jsonify(method_options())

@bp.put("/update")
@role_at_least("accountant", message="Only accountants and admins can edit orders")
def update_order():
    payload = request.get_json(silent=True)
    result = order_service.update_order(
        payload,
        trust_client_meal_price=current_app.config.get("TRUST_CLIENT_MEAL_PRICE", False),
    )
    return ok("Order updated successfully", result)

@bp.delete("/<int:order_id>")
@role_at_least("accountant", message="Only accountants and admins can delete orders")
def delete_order(order_id: int):
    deleted = order_service.delete_order(order_id)
    return jsonify(
        success=True,
        message="Order deleted successfully",
        deletedOrder=deleted,
    )
