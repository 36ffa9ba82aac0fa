"""Webhook signature verification over the exact raw request body."""

import json

import stripe

from donutsme.common.errors import SignatureError, ValidationFailed


class WebhookVerifier:
    """Checks the `stripe-signature` header against the endpoint's signing secret.

    The HMAC is computed by the processor over `"{timestamp}.{body}"`, so the
    body must be the bytes exactly as received, never a re-serialised parse.
    """

    def __init__(self, secret: str, tolerance_seconds: int = 300) -> None:
        self.secret = secret
        self.tolerance_seconds = tolerance_seconds

    def verify(self, payload: bytes, signature: str | None) -> dict:
        """Return the decoded event body once the signature checks out."""

        if not self.secret:
            raise SignatureError("Webhook signing secret is not configured")
        if not signature:
            raise SignatureError("Missing stripe-signature header")
        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SignatureError("Webhook body is not valid UTF-8") from exc
        try:
            stripe.WebhookSignature.verify_header(body, signature, self.secret, self.tolerance_seconds)
        except stripe.SignatureVerificationError as exc:
            raise SignatureError(exc.user_message or str(exc)) from exc

        try:
            event = json.loads(body)
        except ValueError as exc:
            raise ValidationFailed("Webhook body is not valid JSON", error="Webhook error") from exc
        if not isinstance(event, dict):
            raise ValidationFailed("Webhook body is not a JSON object", error="Webhook error")
        return event
