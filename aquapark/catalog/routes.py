# --- catalog/routes.py ---
from flask import jsonify, request
from flask_jwt_extended import jwt_required
from sqlalchemy import func

from ..extensions import db
from ..model import Meal, Ticket, TicketType, TICKET_AVAILABLE, ROLE_LEVEL
from ..utils.decorators import current_user
from . import bp


# ------------------------ helpers ------------------------

def _archived_filter():
    """
    ?archived=true|false filters explicitly. Without it accountants and admins
    see everything and cashiers only what is still on sale.
    """
    raw = request.args.get("archived")
    if raw is not None:
        return raw.strip().lower() == "true"
    u = current_user()
    if u and ROLE_LEVEL.get(u.role, 0) >= ROLE_LEVEL["accountant"]:
        return None
    return False

def _available_counts():
    rows = (
        db.session.query(Ticket.ticket_type_id, func.count(Ticket.id))
        .filter(Ticket.status == TICKET_AVAILABLE)
        .group_by(Ticket.ticket_type_id)
        .all()
    )
    return {tid: count for tid, count in rows}


# ------------------------ CATALOG ROUTES ------------------------

@bp.get("/tickets/ticket-types")
@jwt_required()
def list_ticket_types():
    archived = _archived_filter()
    q = TicketType.query
    if archived is not None:
        q = q.filter(TicketType.archived == archived)
    counts = _available_counts()
    return jsonify([tt.as_api(available=counts.get(tt.id, 0)) for tt in q.order_by(TicketType.id).all()])

@bp.get("/meals")
@jwt_required()
def list_meals():
    archived = _archived_filter()
    q = Meal.query
    if archived is not None:
        q = q.filter(Meal.archived == archived)
    return jsonify([m.as_api() for m in q.order_by(Meal.id).all()])
