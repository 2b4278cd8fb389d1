"""Admission check for cross-chain bridge requests."""
from __future__ import annotations

import logging

from ..amounts import parse_amount
from ..models import BridgeDecision, BridgeRequest, RejectionReason

logger = logging.getLogger(__name__)


class BridgeValidator:
    """Stateless rule check; no funds move."""

    def validate(self, request: BridgeRequest) -> BridgeDecision:
        amount = parse_amount(request.amount)
        if amount is None:
            logger.warning("Bridge rejected: invalid amount %r", request.amount)
            return BridgeDecision(accepted=False, reason=RejectionReason.INVALID_AMOUNT)

        if request.source_chain == request.destination_chain:
            logger.warning(
                "Bridge rejected: source and destination are both %s",
                request.source_chain,
            )
            return BridgeDecision(accepted=False, reason=RejectionReason.SAME_CHAIN)

        return BridgeDecision(accepted=True, amount=amount)
