# ------ aquapark/model/__init__.py ------

from .user import User, ROLE_LEVEL
from .ticket import TicketType, Ticket, TICKET_AVAILABLE, TICKET_SOLD
from .meal import Meal, OrderMeal
from .payment import Payment
from .order import Order
from .credit import CreditAccount, CreditTransaction

__all__ = [
    "User",
    "ROLE_LEVEL",
    "TicketType",
    "Ticket",
    "TICKET_AVAILABLE",
    "TICKET_SOLD",
    "Meal",
    "OrderMeal",
    "Payment",
    "Order",
    "CreditAccount",
    "CreditTransaction",
]
