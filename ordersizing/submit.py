# ordersizing/submit.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from .core import OrderSizingEngine
from .models import SubmittableOrder, ValidationError

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised by a transport when the venue or network refuses the order."""


class SubmissionTransport(Protocol):
    def submit(self, order: SubmittableOrder) -> Optional[str]:
        """Send the order; return a venue reference if one is available."""
        ...


@dataclass(frozen=True, slots=True)
class SubmissionOutcome:
    success: bool
    order: Optional[SubmittableOrder] = None
    reference: Optional[str] = None
    validation: Optional[ValidationError] = None
    error: Optional[str] = None


def place_order(engine: OrderSizingEngine, transport: SubmissionTransport) -> SubmissionOutcome:
    """
    Validate the engine's draft and hand it to `transport`.
    The draft is reset only after the transport accepts the order; retries are the caller's business.
    """
    result = engine.validate()
    if not result.ok:
        return SubmissionOutcome(success=False, validation=result.error)

    order = result.order
    try:
        reference = transport.submit(order)
    except TransportError as exc:
        logger.warning("Error placing order: %s", exc)
        return SubmissionOutcome(success=False, order=order, error=str(exc))

    logger.info(
        "Placed %s %s %s @ %s (%s)",
        order.side.value,
        order.base_size,
        order.order_type.value,
        order.effective_price,
        order.execution_type.value,
    )
    engine.reset()
    return SubmissionOutcome(success=True, order=order, reference=reference)
