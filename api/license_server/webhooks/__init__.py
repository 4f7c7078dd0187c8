from .event import PurchaseEvent, resolve_issued_at, should_issue
from .issuer import IssuanceResult, IssuanceState, LicenseIssuer
from .router import router
from .verifier import WebhookVerifier

__all__ = [
    "router",
    "PurchaseEvent",
    "WebhookVerifier",
    "LicenseIssuer",
    "IssuanceResult",
    "IssuanceState",
    "resolve_issued_at",
    "should_issue",
]
