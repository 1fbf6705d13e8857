"""
Paystack webhook signature verification.

Paystack signs the raw request body with HMAC-SHA512 using the account
secret and sends the hex digest in the x-paystack-signature header.
"""
import hashlib
import hmac
import json
import logging
from typing import Optional, Union

from django.conf import settings

from core_backend.exceptions import SignatureInvalid

logger = logging.getLogger(__name__)


class WebhookVerifier:
    """Validates webhook signatures before any payload is trusted."""

    ALGORITHM = hashlib.sha512

    def __init__(self, secret: Optional[str] = None):
        self.secret = secret if secret is not None else settings.PAYSTACK_WEBHOOK_SECRET

    def compute_signature(self, raw_body: bytes) -> str:
        """
        Compute the hex HMAC-SHA512 digest of the raw body.

        Example:
            >>> WebhookVerifier("sk_test").compute_signature(b"{}")  # doctest: +SKIP
            '5d5a...'
        """
        return hmac.new(self.secret.encode("utf-8"), raw_body, self.ALGORITHM).hexdigest()

    def verify(self, raw_body: Union[bytes, str], signature: Optional[str]) -> dict:
        """
        Check the signature in constant time and return the parsed payload.

        Raises:
            SignatureInvalid: missing secret, missing or wrong signature, or a
                body that is not a JSON object.
        """
        if not self.secret:
            logger.error("Webhook received but PAYSTACK_WEBHOOK_SECRET is not configured")
            raise SignatureInvalid("Webhook secret not configured")
        if not signature:
            raise SignatureInvalid("Missing webhook signature")

        if isinstance(raw_body, str):
            raw_body = raw_body.encode("utf-8")

        expected = self.compute_signature(raw_body)
        if not hmac.compare_digest(expected, signature.strip().lower()):
            logger.warning("Rejected webhook with invalid signature")
            raise SignatureInvalid()

        try:
            payload = json.loads(raw_body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            raise SignatureInvalid("Webhook body is not valid JSON")
        if not isinstance(payload, dict):
            raise SignatureInvalid("Webhook body is not a JSON object")
        return payload
