# aquapark/editing/catalog.py
from ..model.payment import PAYMENT_METHODS, method_options

# used when the payment-method lookup fails
FALLBACK_PAYMENT_METHODS = method_options(PAYMENT_METHODS)


class CatalogSnapshot:
    """
    Read-only view of the ticket types, meals and payment methods an edit
    session may pick from. Taken once per refresh and handed to sessions.
    """

    def __init__(self, ticket_types=(), meals=(), payment_methods=None):
        self.ticket_types = tuple(dict(t) for t in ticket_types)
        self.meals = tuple(dict(m) for m in meals)
        self.payment_methods = tuple(
            dict(p) for p in (payment_methods if payment_methods else FALLBACK_PAYMENT_METHODS)
        )
        self._tickets_by_id = {t["id"]: t for t in self.ticket_types}
        self._meals_by_id = {m["id"]: m for m in self.meals}

    @classmethod
    def fetch(cls, client, archived=None):
        return cls(
            ticket_types=client.ticket_types(archived=archived),
            meals=client.meals(archived=archived),
            payment_methods=client.payment_methods(),
        )

    def ticket_type(self, ticket_type_id):
        return self._tickets_by_id.get(ticket_type_id)

    def meal(self, meal_id):
        return self._meals_by_id.get(meal_id)

    @property
    def method_values(self):
        return {p["value"] for p in self.payment_methods}

    def method_label(self, method):
        for p in self.payment_methods:
            if p["value"] == method:
                return p["label"]
        return method
