# ordersizing/__init__.py
"""
Order Sizing Engine — base/quote size sync, book-walk market pricing, order gating.

Export the primary types and entry points for convenience.
"""
from .models import (
    BookLevel,
    ErrorKind,
    ExecutionType,
    MarketPriceEstimate,
    Modifiers,
    OrderBookSnapshot,
    OrderDraft,
    OrderType,
    PrecisionSpec,
    Side,
    SizeSource,
    SubmittableOrder,
    ValidationError,
    ValidationResult,
)
from .book import resolve_market_execution_price
from .core import OrderSizingEngine, validate_for_submit

__all__ = [
    "BookLevel",
    "ErrorKind",
    "ExecutionType",
    "MarketPriceEstimate",
    "Modifiers",
    "OrderBookSnapshot",
    "OrderDraft",
    "OrderType",
    "PrecisionSpec",
    "Side",
    "SizeSource",
    "SubmittableOrder",
    "ValidationError",
    "ValidationResult",
    "OrderSizingEngine",
    "resolve_market_execution_price",
    "validate_for_submit",
]

__version__ = "0.1.0"
