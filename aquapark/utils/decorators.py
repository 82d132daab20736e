# ------- aquapark/utils/decorators.py -------
from functools import wraps
from flask import jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from ..extensions import db
from ..utils.api import api_error
from ..model.user import User, ROLE_LEVEL

def current_user():
    verify_jwt_in_request()
    uid = get_jwt_identity()
    try:
        uid = int(uid)
    except (TypeError, ValueError):
        uid = None
    return db.session.get(User, uid) if uid else None

def role_at_least(min_role: str, message: str | None = None):  # admin > accountant > cashier
    min_level = ROLE_LEVEL[min_role]
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            u = current_user()
            if not u:
                return jsonify(api_error("Unauthorized")), 401
            if ROLE_LEVEL.get(u.role, 0) < min_level:
                return jsonify(api_error(message or "Forbidden")), 403
            return fn(*args, **kwargs)
        return wrapper
    return decorator
