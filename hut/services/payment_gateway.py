"""Boundary to the payment provider.

Gateways return ``PaymentOutcome`` values instead of raising, so a booking
mutator can always finish and record the booking as paid, pending or failed.
Only the mock provider ships here; real provider wire formats plug in behind
the same two methods.
"""

import logging
import secrets
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class PaymentOutcome:
    provider: str
    status: str  # "paid", "redirect" or "failed"
    reference: str = ""
    payment_url: Optional[str] = None
    external_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def failed(self):
        return self.status == "failed"

    @classmethod
    def failure(cls, provider, message, reference=""):
        return cls(provider=provider, status="failed", reference=reference, error=message)


class PaymentGateway:
    name = "base"

    def __init__(self, timeout_seconds=None):
        self.timeout_seconds = timeout_seconds
        self._calls = ThreadPoolExecutor(max_workers=4, thread_name_prefix="hut-payment") if timeout_seconds else None

    def _bounded(self, func, *args):
        # A provider call that hangs would stall every queued writer behind it.
        if self._calls is None:
            return func(*args)
        try:
            return self._calls.submit(func, *args).result(timeout=self.timeout_seconds)
        except FutureTimeout as exc:
            raise TimeoutError(f"{self.name} did not respond within {self.timeout_seconds}s") from exc

    def _initialize(self, booking_id, amount_naira, customer_name, email, phone, callback_base_url):
        raise NotImplementedError

    def _verify(self, reference, callback_params):
        raise NotImplementedError

    def initialize(self, booking_id, amount_naira, customer_name, email, phone, callback_base_url):
        try:
            return self._bounded(
                self._initialize, booking_id, amount_naira, customer_name, email, phone, callback_base_url
            )
        except Exception as exc:
            logger.warning("Payment initialization failed for booking %s: %s", booking_id, exc)
            return PaymentOutcome.failure(self.name, str(exc))

    def verify(self, reference, callback_params=None):
        try:
            return self._bounded(self._verify, reference, callback_params or {})
        except Exception as exc:
            logger.warning("Payment verification failed for reference %s: %s", reference, exc)
            return PaymentOutcome.failure(self.name, str(exc), reference=reference)


class MockPaymentGateway(PaymentGateway):
    """Local provider.

    ``instant`` mode settles at initialization; ``redirect`` mode hands back a
    callback URL and settles when the callback is verified.
    """

    name = "mock"

    def __init__(self, mode="instant", timeout_seconds=None):
        super().__init__(timeout_seconds=timeout_seconds)
        if mode not in {"instant", "redirect"}:
            raise ValueError(f"Unsupported mock payment mode: {mode}")
        self.mode = mode

    @staticmethod
    def _reference():
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
        return f"HUT-MOCK-{stamp}-{secrets.token_hex(3).upper()}"

    def _initialize(self, booking_id, amount_naira, customer_name, email, phone, callback_base_url):
        reference = self._reference()
        if self.mode == "instant":
            return PaymentOutcome(provider=self.name, status="paid", reference=reference, external_id=reference)
        return PaymentOutcome(
            provider=self.name,
            status="redirect",
            reference=reference,
            payment_url=f"{callback_base_url.rstrip('/')}/api/v1/payments/callback/mock?reference={reference}",
        )

    def _verify(self, reference, callback_params):
        if str(callback_params.get("status", "successful")).lower() in {"failed", "cancelled"}:
            return PaymentOutcome.failure(self.name, "Payment was not completed.", reference=reference)
        return PaymentOutcome(provider=self.name, status="paid", reference=reference, external_id=reference)


def build_payment_gateway(config):
    provider = str(config.get("PAYMENT_PROVIDER", "mock")).lower()
    if provider == "mock":
        return MockPaymentGateway(
            mode=config.get("MOCK_PAYMENT_MODE", "instant"),
            timeout_seconds=config.get("PAYMENT_TIMEOUT_SECONDS"),
        )
    raise ValueError(f"Unsupported PAYMENT_PROVIDER value: {provider}")
