# aquapark/editing/board.py
import logging
from datetime import date

from .catalog import CatalogSnapshot
from .errors import InvalidSelection, SessionClosed
from .session import OrderEditSession

log = logging.getLogger(__name__)


class OrdersBoard:
    """
    The orders screen without the screen: a date range, the orders in it, the
    catalog snapshot, and at most one open edit session.
    """

    def __init__(self, client, start=None, end=None):
        self.client = client
        self.start = start or date.today()
        self.end = end or self.start
        self.orders = []
        self.catalog = CatalogSnapshot()
        self.session = None

    def refresh(self):
        self.orders = self.client.orders_between(self.start, self.end)
        return self.orders

    def refresh_catalog(self, archived=None):
        self.catalog = CatalogSnapshot.fetch(self.client, archived=archived)
        return self.catalog

    def set_range(self, start, end):
        if end < start:
            raise InvalidSelection("End date must not be before start date")
        self.start, self.end = start, end
        return self.refresh()

    def find(self, order_id):
        for o in self.orders:
            if o.get("order_id") == order_id:
                return o
        raise InvalidSelection(f"Order #{order_id} is not in the current list")

    def open(self, order_id):
        self.session = OrderEditSession(self.find(order_id), self.catalog)
        return self.session

    def cancel(self):
        self.session = None

    def save(self):
        """Commit the open session, then drop it and reload the list."""
        if self.session is None:
            raise SessionClosed("No order is being edited")
        result = self.session.save(self.client)
        self.session = None
        self.refresh()
        return result

    def delete(self, order_id):
        result = self.client.delete_order(order_id)
        if self.session is not None and self.session.order_id == order_id:
            self.session = None
        self.refresh()
        log.info("order %s deleted", order_id)
        return result
