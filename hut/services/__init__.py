from dataclasses import dataclass

from hut.services.auth_service import AuthService
from hut.services.availability_service import AvailabilityService
from hut.services.booking_service import BookingService
from hut.services.fraud_service import FraudService
from hut.services.hotel_service import HotelService
from hut.services.notification_service import NotificationService
from hut.services.payment_gateway import MockPaymentGateway, PaymentGateway, PaymentOutcome, build_payment_gateway
from hut.services.pricing_service import PricingService
from hut.services.refund_service import RefundService
from hut.services.results import Outcome
from hut.services.wallet_service import WalletService


@dataclass
class Services:
    store: object
    auth: AuthService
    bookings: BookingService
    hotels: HotelService
    wallet: WalletService


def build_services(config, store, gateway=None):
    """Wire every service to one store so they share its write queue."""
    auth = AuthService(store, config)
    return Services(
        store=store,
        auth=auth,
        bookings=BookingService(store, config, gateway or build_payment_gateway(config)),
        hotels=HotelService(store, auth),
        wallet=WalletService(store),
    )


__all__ = [
    "AuthService",
    "AvailabilityService",
    "BookingService",
    "FraudService",
    "HotelService",
    "MockPaymentGateway",
    "NotificationService",
    "Outcome",
    "PaymentGateway",
    "PaymentOutcome",
    "PricingService",
    "RefundService",
    "Services",
    "WalletService",
    "build_services",
]
