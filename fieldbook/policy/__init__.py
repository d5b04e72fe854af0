from fieldbook.policy.cancellation import CancellationPolicy, PolicyDecision
from fieldbook.policy.refunds import explicit_refund_amount, resolve_adjusted_amount

__all__ = [
    "CancellationPolicy", "PolicyDecision",
    "explicit_refund_amount", "resolve_adjusted_amount",
]
