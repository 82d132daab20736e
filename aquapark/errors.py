# aquapark/errors.py
import logging

from werkzeug.exceptions import HTTPException

from .extensions import db
from .utils.api import err

log = logging.getLogger(__name__)


class OrderError(Exception):
    """Base for failures of an order operation; rolls the transaction back."""
    status_code = 400

    def __init__(self, message, **data):
        super().__init__(message)
        self.message = message
        self.data = data


class InvalidPayload(OrderError):
    status_code = 400


class NotFound(OrderError):
    status_code = 404


class UnknownTicketType(OrderError):
    status_code = 422


class UnknownMeal(OrderError):
    status_code = 422


def register_error_handlers(app):
    @app.errorhandler(OrderError)
    def _order_error(e: OrderError):
        db.session.rollback()
        return err(e.message, e.status_code, e.data or None)

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return err(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def _unhandled(e: Exception):
        db.session.rollback()
        log.exception("unhandled error: %s", e)
        return err("Server error", 500)
