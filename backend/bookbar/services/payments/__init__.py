from .provider import (
    CheckoutSession,
    PaymentProvider,
    SessionDetails,
    StripePaymentProvider,
    WebhookEvent,
    get_payment_provider,
)
from .lifecycle import (
    BALANCE,
    DEPOSIT,
    ConfirmationResult,
    apply_payment_confirmation,
    balance_due,
    confirm_from_return,
    create_checkout,
    handle_webhook,
    refund_payment,
)

__all__ = [
    "CheckoutSession",
    "PaymentProvider",
    "SessionDetails",
    "StripePaymentProvider",
    "WebhookEvent",
    "get_payment_provider",
    "BALANCE",
    "DEPOSIT",
    "ConfirmationResult",
    "apply_payment_confirmation",
    "balance_due",
    "confirm_from_return",
    "create_checkout",
    "handle_webhook",
    "refund_payment",
]
