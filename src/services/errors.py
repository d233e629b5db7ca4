from typing import Any, Dict, Optional


class SubscriptionError(Exception):
    """Base for every reason a subscription request can be turned down."""

    message_key = "form_submission.invalid_form"

    def __init__(
        self,
        message: str,
        message_key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if message_key is not None:
            self.message_key = message_key
        self.context = context or {}


class ValidationError(SubscriptionError):
    """Malformed or missing email, malformed request."""


class NotFoundError(SubscriptionError):
    message_key = "form_submission.variant_not_found"


class ConflictError(SubscriptionError):
    message_key = "form_submission.already_saved"


class InfrastructureError(SubscriptionError):
    """Token entropy, persistence or dispatch failure."""

    message_key = "form_submission.subscription_failed"
