import requests
import logging
from typing import Dict, Any, Optional

from django.conf import settings

from core_backend.exceptions import ProviderUnavailable

logger = logging.getLogger(__name__)


class PaystackAPIService:
    """
    Service for interacting with Paystack's REST API: initialize, verify, refund.

    Every failure (network, HTTP error, or a response with status=false)
    surfaces as ProviderUnavailable. Retries belong to the caller.
    """

    def __init__(self, secret_key: Optional[str] = None, base_url: Optional[str] = None, timeout: Optional[int] = None):
        self.secret_key = secret_key if secret_key is not None else settings.PAYSTACK_SECRET_KEY
        self.base_url = (base_url or settings.PAYSTACK_BASE_URL).rstrip("/")
        self.timeout = timeout or getattr(settings, "PAYSTACK_TIMEOUT_SECONDS", 30)

    def _get_headers(self) -> Dict[str, str]:
        if not self.secret_key:
            raise ProviderUnavailable("configuration", "PAYSTACK_SECRET_KEY is not set")
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    def _make_request(
        self, method: str, endpoint: str, operation: str, data: Dict[str, Any] = None
    ) -> Dict[str, Any]:
        """Make an authenticated request and return the response's data object."""
        url = f"{self.base_url}{endpoint}"
        headers = self._get_headers()

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=headers,
                json=data if data else None,
                timeout=self.timeout,
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            detail = str(e)
            if getattr(e, "response", None) is not None:
                detail = f"{detail} - {e.response.text[:500]}"
            logger.error(f"Paystack API request failed: {method} {url} - {detail}")
            raise ProviderUnavailable(operation, detail)
        except ValueError as e:
            logger.error(f"Paystack API returned invalid JSON: {method} {url} - {e}")
            raise ProviderUnavailable(operation, f"Invalid JSON response: {e}")

        if not body.get("status"):
            message = body.get("message", "unknown error")
            logger.error(f"Paystack API rejected {operation}: {message}")
            raise ProviderUnavailable(operation, message)

        return body.get("data") or {}

    def initialize(self, email: str, amount: int, reference: str, metadata: Dict[str, Any] = None, callback_url: str = None) -> Dict[str, Any]:
        """
        Start a hosted checkout for amount (minor units).

        Returns:
            dict with authorization_url, access_code and reference
        """
        payload = {
            "email": email,
            "amount": amount,
            "reference": reference,
            "metadata": metadata or {},
        }
        if callback_url:
            payload["callback_url"] = callback_url
        data = self._make_request("POST", "/transaction/initialize", "initialize", payload)
        logger.info(f"Paystack transaction initialized: {reference}")
        return data

    def verify(self, reference: str) -> Dict[str, Any]:
        """
        Look up a transaction by reference.

        Returns:
            dict with status, amount (minor units), reference, paid_at, metadata
        """
        return self._make_request("GET", f"/transaction/verify/{reference}", "verify")

    def refund(self, transaction_reference: str, amount: int) -> Dict[str, Any]:
        """Refund amount (minor units) against an earlier transaction."""
        data = self._make_request(
            "POST",
            "/refund",
            "refund",
            {"transaction": transaction_reference, "amount": amount},
        )
        logger.info(f"Paystack refund requested for {transaction_reference}: {amount}")
        return data
