from .board import OrdersBoard
from .catalog import CatalogSnapshot
from .client import OrdersApiClient
from .errors import (
    ApiError,
    DiscountExceedsGross,
    EditError,
    EditWarning,
    EmptyOrder,
    InvalidSelection,
    LastPaymentRequired,
    LimitExceeded,
    NegativeTotal,
    NoChanges,
    NotReconciled,
    SaveFailed,
    SaveInProgress,
    SessionClosed,
    TooManyPayments,
)
from .session import MAX_MEALS_PER_TYPE, MAX_TICKETS_PER_TYPE, OrderEditSession

__all__ = [
    "OrdersBoard",
    "CatalogSnapshot",
    "OrdersApiClient",
    "OrderEditSession",
    "MAX_TICKETS_PER_TYPE",
    "MAX_MEALS_PER_TYPE",
    "ApiError",
    "DiscountExceedsGross",
    "EditError",
    "EditWarning",
    "EmptyOrder",
    "InvalidSelection",
    "LastPaymentRequired",
    "LimitExceeded",
    "NegativeTotal",
    "NoChanges",
    "NotReconciled",
    "SaveFailed",
    "SaveInProgress",
    "SessionClosed",
    "TooManyPayments",
]
