# English renderings of the outcome message keys
MESSAGES = {
    "form_submission.invalid_form": "The submitted form is not valid.",
    "form_submission.variant_not_found": "The requested product variant does not exist.",
    "form_submission.variant_not_oos": "The requested product variant is available, no need to subscribe.",
    "form_submission.already_saved": "The email {email} is already subscribed to this product.",
    "form_submission.subscription_failed": "Something went wrong, please try again later.",
    "form_submission.subscription_successfully": "You will be notified when the product is back in stock.",
    "deletion_submission.successful": "Your subscription has been removed.",
    "deletion_submission.not-successful": "There was nothing to delete.",
    "deletion_submission.failed": "Your subscription could not be removed, please try again later.",
}


def translate(message_key: str, context: dict | None = None, fallback: str | None = None) -> str:
    template = MESSAGES.get(message_key)
    if template is None:
        return fallback or message_key
    try:
        return template.format(**(context or {}))
    except KeyError:
        return fallback or template
