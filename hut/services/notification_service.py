from hut.models import new_notification


def format_naira(amount):
    return f"NGN {int(round(amount or 0)):,}"


class NotificationService:
    @staticmethod
    def push(data, booking_id, hotel_id, channel, recipient, body):
        notification = new_notification(
            booking_id=booking_id,
            hotel_id=hotel_id,
            channel=channel,
            recipient=recipient,
            body=body,
        )
        data["notifications"].append(notification)
        return notification

    @staticmethod
    def _to_guest(data, booking, sms_body, email_body):
        return [
            NotificationService.push(data, booking["id"], booking["hotel_id"], "sms", booking.get("phone"), sms_body),
            NotificationService.push(data, booking["id"], booking["hotel_id"], "email", booking.get("email"), email_body),
        ]

    @staticmethod
    def booking_acknowledgements(data, booking, hotel):
        total = format_naira(booking["pricing"]["total_paid"])
        sms_body = (
            f"Hut! Booking confirmed ({booking['id'][:8]}) at {hotel['name']} from "
            f"{booking['check_in_date']} to {booking['check_out_date']}. Total paid: {total}."
        )
        email_body = (
            f"Hello {booking['customer_name']}, your Hut booking is confirmed.\n\n"
            f"Hotel: {hotel['name']}\n"
            f"Stay: {booking['check_in_date']} to {booking['check_out_date']} ({booking['nights']} nights)\n"
            f"Total paid: {total}\n"
            f"Emergency contact: {booking['emergency_contact_name']} ({booking['emergency_contact_phone']})\n\n"
            "Thank you for using Hut!"
        )
        return NotificationService._to_guest(data, booking, sms_body, email_body)

    @staticmethod
    def cancellation_acknowledgements(data, booking, hotel, refund):
        amount = format_naira(refund["refund_total"])
        sms_body = f"Hut! Booking {booking['id'][:8]} cancelled. Refund: {amount}."
        email_body = (
            f"Hello {booking['customer_name']},\n\n"
            f"Your booking at {hotel['name']} has been cancelled.\n"
            f"Refund approved: {amount}.\n"
            f"Cancellation lead time: {max(0, refund['lead_hours']):.1f} hours before check-in.\n\n"
            "Regards,\nHut Support"
        )
        return NotificationService._to_guest(data, booking, sms_body, email_body)

    @staticmethod
    def for_booking(data, booking_id):
        return [item for item in data.get("notifications", []) if item.get("booking_id") == booking_id]
