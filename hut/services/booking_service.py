import copy
import logging
from datetime import datetime, timezone

from hut.errors import AppError
from hut.models import can_transition, new_booking, new_fraud_event, new_payment, new_payment_session
from hut.services.auth_service import can_access_hotel, find_user_by_id
from hut.services.availability_service import AvailabilityService
from hut.services.fraud_service import FraudService
from hut.services.notification_service import NotificationService
from hut.services.pricing_service import DEFAULT_MIN_SERVICE_FEE, PricingService
from hut.services.refund_service import RefundService
from hut.services.results import Outcome
from hut.utils.dates import iso_now, validate_stay_dates

logger = logging.getLogger(__name__)

FRAUD_BLOCK_MESSAGE = "Booking blocked by fraud protection. Contact support on WhatsApp for manual review."
SOLD_OUT_BEFORE_PAYMENT = "The room sold out before your payment was confirmed. Your payment will be refunded."


def _find(rows, **criteria):
    return next((row for row in rows if all(row.get(key) == value for key, value in criteria.items())), None)


class BookingService:
    def __init__(self, store, config, gateway):
        self.store = store
        self.gateway = gateway
        self.fraud = FraudService(config)
        self.min_service_fee = int(config.get("MIN_SERVICE_FEE", DEFAULT_MIN_SERVICE_FEE))
        self.default_callback_base_url = config.get("BASE_URL", "http://localhost:5000")

    # -- reads -------------------------------------------------------------

    def hotel_availability(self, hotel_id, check_in_date, check_out_date):
        validate_stay_dates(check_in_date, check_out_date)
        snapshot = self.store.snapshot()
        hotel = _find(snapshot["hotels"], id=hotel_id)
        if not hotel:
            raise AppError("Hotel not found.", 404)
        return {
            "hotel_id": hotel_id,
            "check_in_date": check_in_date,
            "check_out_date": check_out_date,
            "rooms": AvailabilityService.hotel_availability(snapshot, hotel_id, check_in_date, check_out_date),
        }

    @staticmethod
    def _visible_to(user, booking):
        if not user:
            return False
        if booking.get("customer_user_id") == user.get("id"):
            return True
        return can_access_hotel(user, booking.get("hotel_id"))

    def get_booking(self, booking_id, user):
        snapshot = self.store.snapshot()
        booking = _find(snapshot["bookings"], id=booking_id)
        if not booking or not self._visible_to(user, booking):
            raise AppError("Booking not found.", 404)
        payment = _find(snapshot["payments"], booking_id=booking_id, transaction_type="booking_payment")
        session = _find(snapshot["payment_sessions"], booking_id=booking_id, status="pending")
        return {
            "booking": booking,
            "payment": payment,
            "payment_session": session,
            "notifications": NotificationService.for_booking(snapshot, booking_id),
            "refund_rules": RefundService.get_refund_policy_rules(booking.get("cancellation_policy")),
        }

    def bookings_for_customer(self, user_id):
        snapshot = self.store.snapshot()
        rows = [item for item in snapshot["bookings"] if item.get("customer_user_id") == user_id]
        rows.sort(key=lambda item: item.get("created_at") or "", reverse=True)
        return rows

    def refund_quote(self, booking_id, user, now=None):
        """What a cancellation right now would refund, computed on a snapshot."""
        booking = self.get_booking(booking_id, user)["booking"]
        cancelled_at = now or datetime.now(timezone.utc)
        pricing = booking.get("pricing") or {}
        return RefundService.calculate_refund(
            booking.get("cancellation_policy"),
            cancelled_at,
            booking["check_in_date"],
            pricing.get("total_paid", 0),
            pricing.get("pickup_total", 0),
            booking.get("pickup_requested", False),
        )

    # -- writes ------------------------------------------------------------

    @staticmethod
    def mark_booking_paid(data, booking, hotel, provider, reference, external_id=None):
        if booking.get("payment_status") == "paid":
            return None

        booking["status"] = "confirmed"
        booking["payment_status"] = "paid"
        booking["payment_provider"] = provider
        booking["payment_reference"] = reference
        booking["payment_external_id"] = external_id or reference
        booking["paid_at"] = iso_now()

        pricing = booking["pricing"]
        payment = new_payment(
            booking_id=booking["id"],
            hotel_id=hotel["id"],
            user_id=booking.get("customer_user_id"),
            transaction_ref=reference,
            transaction_type="booking_payment",
            payment_provider=provider,
            payment_external_id=external_id or reference,
            gross_amount=pricing["total_paid"],
            hotel_payout=pricing["hotel_payout"],
            platform_earning=pricing["platform_revenue"],
            commission_rate=pricing["commission_rate_applied"],
            hotel_bank_account=hotel.get("bank_account"),
            platform_bank_account=data["platform"].get("bank_account"),
            created_at=booking["paid_at"],
        )
        data["payments"].append(payment)
        NotificationService.booking_acknowledgements(data, booking, hotel)
        return payment

    def create_booking(
        self,
        customer_id,
        hotel_id,
        room_id,
        check_in_date,
        check_out_date,
        guests=1,
        pickup_requested=False,
        emergency_contact_name="",
        emergency_contact_phone="",
        special_request="",
        callback_base_url=None,
        now=None,
    ):
        hotel_id = str(hotel_id or "")
        room_id = str(room_id or "")
        emergency_contact_name = (emergency_contact_name or "").strip()
        emergency_contact_phone = (emergency_contact_phone or "").strip()
        if not hotel_id or not room_id or not emergency_contact_name or not emergency_contact_phone:
            raise AppError("Missing required booking information.", 400)
        nights = validate_stay_dates(check_in_date, check_out_date)
        try:
            guests = max(1, int(guests or 1))
        except (TypeError, ValueError) as exc:
            raise AppError("Guests must be a whole number.", 400) from exc
        callback_base_url = callback_base_url or self.default_callback_base_url

        def mutator(data):
            user = find_user_by_id(data, customer_id)
            if not user:
                return Outcome.failure("Your account session is no longer valid. Please log in again.", 401)

            hotel = _find(data["hotels"], id=hotel_id)
            room = _find(data["rooms"], id=room_id, hotel_id=hotel_id)
            if not hotel or not room:
                return Outcome.failure("Selected hotel/room no longer exists.", 404)

            capacity = AvailabilityService.assert_room_available(data, room, check_in_date, check_out_date)
            if not capacity.ok:
                return capacity

            commission_rate = hotel.get("commission_rate") or data["platform"].get("default_commission_rate")
            pricing = PricingService.calculate_booking_price(
                room["price_per_night"],
                nights,
                commission_rate,
                pickup_requested=bool(pickup_requested),
                pickup_fee=hotel.get("pickup_fee"),
                min_service_fee=self.min_service_fee,
            )

            assessment = self.fraud.assess(
                data, user.get("email"), user.get("phone"), check_in_date, pricing["total_paid"], now=now
            )
            if assessment["blocked"]:
                data["fraud_events"].append(
                    new_fraud_event(
                        hotel_id=hotel_id,
                        email=user.get("email"),
                        phone=user.get("phone"),
                        score=assessment["score"],
                        flags=assessment["flags"],
                        action="blocked",
                    )
                )
                logger.warning("Blocked booking attempt by %s (score %s)", user.get("email"), assessment["score"])
                return Outcome.failure(FRAUD_BLOCK_MESSAGE, 403)

            booking = new_booking(
                hotel_id=hotel_id,
                room_id=room_id,
                room_category=room.get("category"),
                customer_user_id=user["id"],
                customer_name=user.get("name"),
                email=user.get("email"),
                phone=user.get("phone"),
                emergency_contact_name=emergency_contact_name,
                emergency_contact_phone=emergency_contact_phone,
                check_in_date=check_in_date,
                check_out_date=check_out_date,
                nights=nights,
                guests=guests,
                pickup_requested=bool(pickup_requested),
                special_request=(special_request or "").strip(),
                pricing=pricing,
                fraud_score=assessment["score"],
                fraud_flags=assessment["flags"],
                cancellation_policy=hotel.get("cancellation_policy"),
            )
            data["bookings"].append(booking)

            if assessment["review_needed"]:
                data["fraud_events"].append(
                    new_fraud_event(
                        hotel_id=hotel_id,
                        email=booking["email"],
                        phone=booking["phone"],
                        score=assessment["score"],
                        flags=assessment["flags"],
                        action="review",
                    )
                )
                logger.info("Booking %s flagged for fraud review (score %s)", booking["id"], assessment["score"])

            # The provider call runs under the write lock; later writers wait for it.
            payment = self.gateway.initialize(
                booking["id"],
                pricing["total_paid"],
                booking["customer_name"],
                booking["email"],
                booking["phone"],
                callback_base_url,
            )
            if payment.failed:
                booking["status"] = "payment_failed"
                booking["payment_status"] = "failed"
                booking["payment_error"] = payment.error
                return Outcome.failure("Unable to initialize payment. Please try again later.", 502)

            data["payment_sessions"].append(
                new_payment_session(
                    booking_id=booking["id"],
                    provider=payment.provider,
                    reference=payment.reference,
                    payment_url=payment.payment_url,
                    status="paid" if payment.status == "paid" else "pending",
                )
            )

            if payment.status == "paid":
                self.mark_booking_paid(data, booking, hotel, payment.provider, payment.reference, payment.external_id)
                return Outcome.success({"booking": copy.deepcopy(booking), "next_step": "success"})

            booking["payment_provider"] = payment.provider
            booking["payment_reference"] = payment.reference
            return Outcome.success(
                {"booking": copy.deepcopy(booking), "next_step": "payment", "payment_url": payment.payment_url}
            )

        result = self.store.write(mutator).unwrap()
        logger.info("Booking %s created (%s)", result["booking"]["id"], result["booking"]["status"])
        return result

    def confirm_payment(self, provider, reference, callback_params=None):
        provider = (provider or "").strip().lower()
        reference = (reference or "").strip()
        if not reference:
            raise AppError("Missing payment reference in callback.", 400)

        def mutator(data):
            session = next(
                (
                    item
                    for item in data["payment_sessions"]
                    if item.get("provider") == provider
                    and item.get("status") == "pending"
                    and item.get("reference")
                    and (item["reference"] == reference or item["reference"] in reference)
                ),
                None,
            )
            if not session:
                return Outcome.failure("Payment session not found for callback reference.", 404)

            booking = _find(data["bookings"], id=session["booking_id"])
            if not booking:
                return Outcome.failure("Booking linked to payment session not found.", 404)
            hotel = _find(data["hotels"], id=booking["hotel_id"])
            if not hotel:
                return Outcome.failure("Hotel linked to booking not found.", 404)

            if booking.get("payment_status") == "paid":
                return Outcome.success(copy.deepcopy(booking))

            verification = self.gateway.verify(session["reference"], callback_params)
            if verification.failed:
                session["status"] = "failed"
                booking["status"] = "payment_failed"
                booking["payment_status"] = "failed"
                booking["payment_error"] = verification.error
                return Outcome.failure(
                    "Payment verification failed. Create a new booking to try again.", 402
                )

            # Pending bookings hold no inventory, so capacity is re-checked at confirmation.
            room = _find(data["rooms"], id=booking.get("room_id"), hotel_id=booking["hotel_id"])
            capacity = (
                AvailabilityService.assert_room_available(
                    data, room, booking["check_in_date"], booking["check_out_date"]
                )
                if room
                else Outcome.failure("Room linked to booking not found.", 404)
            )
            if not capacity.ok:
                session["status"] = "failed"
                session["verified_at"] = iso_now()
                booking["status"] = "payment_failed"
                booking["payment_status"] = "failed"
                booking["payment_error"] = SOLD_OUT_BEFORE_PAYMENT
                logger.warning(
                    "Booking %s sold out before payment %s was confirmed; refund the captured payment manually.",
                    booking["id"],
                    session["reference"],
                )
                return Outcome.failure(SOLD_OUT_BEFORE_PAYMENT, 409)

            session["status"] = "paid"
            session["verified_at"] = iso_now()
            self.mark_booking_paid(
                data, booking, hotel, session["provider"], session["reference"], verification.external_id
            )
            return Outcome.success(copy.deepcopy(booking))

        booking = self.store.write(mutator).unwrap()
        logger.info("Payment confirmed for booking %s", booking["id"])
        return booking

    def cancel_booking(self, booking_id, customer_id, now=None):
        cancelled_at = now or datetime.now(timezone.utc)

        def mutator(data):
            booking = _find(data["bookings"], id=booking_id)
            if not booking or booking.get("customer_user_id") != customer_id:
                return Outcome.failure("Booking not found.", 404)
            if booking.get("status") == "cancelled":
                return Outcome.failure("Booking has already been cancelled.", 409)
            if booking.get("status") != "confirmed":
                return Outcome.failure("Only confirmed bookings can be cancelled online.", 409)

            hotel = _find(data["hotels"], id=booking["hotel_id"]) or {"id": booking["hotel_id"], "name": ""}
            pricing = booking["pricing"]
            # The policy frozen on the booking applies, not the hotel's current one.
            refund = RefundService.calculate_refund(
                booking.get("cancellation_policy"),
                cancelled_at,
                booking["check_in_date"],
                pricing["total_paid"],
                pricing.get("pickup_total", 0),
                booking.get("pickup_requested", False),
            )

            booking["status"] = "cancelled"
            booking["payment_status"] = RefundService.payment_status_for_refund(
                refund["refund_total"], pricing["total_paid"]
            )
            booking["cancelled_at"] = cancelled_at.isoformat()
            booking["refund"] = refund

            hotel_share = min(pricing["hotel_payout"], refund["refund_total"])
            data["payments"].append(
                new_payment(
                    booking_id=booking["id"],
                    hotel_id=booking["hotel_id"],
                    user_id=booking.get("customer_user_id"),
                    transaction_ref=f"HUT-RFND-{booking['id'][:8].upper()}",
                    transaction_type="refund",
                    payment_provider=booking.get("payment_provider") or "n/a",
                    payment_external_id=booking.get("payment_external_id") or booking.get("payment_reference") or "n/a",
                    gross_amount=-refund["refund_total"],
                    hotel_payout=-hotel_share,
                    platform_earning=-max(0, refund["refund_total"] - pricing["hotel_payout"]),
                    commission_rate=pricing.get("commission_rate_applied", 0),
                    hotel_bank_account=hotel.get("bank_account"),
                    platform_bank_account=data["platform"].get("bank_account"),
                    created_at=booking["cancelled_at"],
                )
            )
            NotificationService.cancellation_acknowledgements(data, booking, hotel, refund)
            return Outcome.success(copy.deepcopy(booking))

        booking = self.store.write(mutator).unwrap()
        logger.info("Booking %s cancelled; refund %s", booking_id, booking["refund"]["refund_total"])
        return booking

    def check_in(self, booking_id, actor):
        def mutator(data):
            booking = _find(data["bookings"], id=booking_id)
            if not booking or not can_access_hotel(actor, booking.get("hotel_id")):
                return Outcome.failure("Booking not found.", 404)
            if not can_transition(booking, "checked_in"):
                return Outcome.failure("Only confirmed bookings can be checked in.", 409)
            booking["status"] = "checked_in"
            booking["checked_in_at"] = iso_now()
            return Outcome.success(copy.deepcopy(booking))

        return self.store.write(mutator).unwrap()
