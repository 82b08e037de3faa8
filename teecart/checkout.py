"""
Checkout: serializing the cart for the payment session, and confirming the
payment once the visitor comes back from the hosted checkout page.

Payment confirmation races the payment provider's webhook. When the visitor
lands on the success page first, the backend doesn't know about the payment
yet, so confirmation is retried a fixed number of times with a fixed delay.
The server makes one attempt per request and the visitor's page polls, so no
request waits out the delay:

    pending -> retrying(n) -> confirmed
                           -> failed     (non-fatal: "check your email")
"""

import time

from teecart.client import BookingApiError
from teecart.config import MAX_PLAYERS_PER_TEE, PAYMENT_CONFIRM_DELAY_SECONDS, PAYMENT_CONFIRM_MAX_ATTEMPTS
from teecart.timeutils import parse_timestamp

PENDING = "pending"
RETRYING = "retrying"
CONFIRMED = "confirmed"
FAILED = "failed"

PROCESSING_MESSAGE = (
    "Your payment is still being processed. You will receive a confirmation "
    "email shortly; if it doesn't arrive, please contact support."
)


class CheckoutError(ValueError):
    pass


def checkout_line(item):
    return {
        "courseId": item.course_id,
        "courseName": item.course_name,
        "date": item.date,
        "time": item.time,
        "players": item.players,
        "packageId": item.package.id,
        "packageName": item.package.name,
        "addOns": [a.to_dict() for a in item.add_ons],
        "totalPrice": item.total_price,
        "providerType": item.provider_type,
    }


def build_checkout_request(items, customer_info):
    """Payload for POST /api/checkout/create-session"""
    if not items:
        raise CheckoutError("Your cart is empty")

    customer_info = customer_info or {}
    name = (customer_info.get("name") or "").strip()
    email = (customer_info.get("email") or "").strip()
    if not name or not email:
        raise CheckoutError("Please fill in your name and email")

    return {
        "items": [checkout_line(item) for item in items],
        "customerInfo": {
            "name": name,
            "email": email,
            "phone": (customer_info.get("phone") or "").strip(),
        },
        "totalAmount": sum(item.total_price for item in items),
    }


def build_booking_request(data):
    """
    Payload for POST /api/bookings: a single tee time requested without
    payment, confirmed later by the course.
    """
    data = data or {}
    course_id = data.get("courseId")
    tee_time = data.get("teeTime")
    players = data.get("players")
    if not course_id or not tee_time:
        raise CheckoutError("courseId and teeTime are required")
    try:
        parse_timestamp(tee_time)
    except (ValueError, TypeError):
        raise CheckoutError(f"Invalid teeTime: {tee_time!r}")
    if isinstance(players, bool) or not isinstance(players, int) or not 1 <= players <= MAX_PLAYERS_PER_TEE:
        raise CheckoutError(f"players must be between 1 and {MAX_PLAYERS_PER_TEE}")

    name = str(data.get("customerName") or "").strip()
    email = str(data.get("customerEmail") or "").strip()
    if not name or not email:
        raise CheckoutError("Please fill in your name and email")

    return {
        "courseId": str(course_id),
        "teeTime": tee_time,
        "players": players,
        "customerName": name,
        "customerEmail": email,
        "customerPhone": str(data.get("customerPhone") or "").strip(),
        "status": "PENDING",
    }


def is_payment_confirmed(result):
    if not isinstance(result, dict):
        return False
    if result.get("success") is True:
        return True
    return result.get("status") in ("confirmed", "complete") or result.get("payment_status") == "paid"


class PaymentConfirmation:
    """
    Bounded retry of the payment confirmation call.

    confirm(session_id) is the backend call; sleep is injected so tests run
    without waiting. attempts resumes a confirmation whose earlier attempts
    happened in previous requests.
    """

    def __init__(self, session_id, confirm, max_attempts=PAYMENT_CONFIRM_MAX_ATTEMPTS,
                 delay_seconds=PAYMENT_CONFIRM_DELAY_SECONDS, sleep=time.sleep, attempts=0):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if not 0 <= attempts < max_attempts:
            raise ValueError(f"attempts must be between 0 and {max_attempts - 1}")
        self.session_id = session_id
        self.confirm = confirm
        self.max_attempts = max_attempts
        self.delay_seconds = delay_seconds
        self.sleep = sleep
        self.state = RETRYING if attempts else PENDING
        self.attempts = attempts
        self.result = None
        self.last_error = None

    @property
    def done(self):
        return self.state in (CONFIRMED, FAILED)

    def attempt(self):
        """Make one confirmation call and advance the state"""
        if self.done:
            return self.state

        self.attempts += 1
        try:
            self.result = self.confirm(self.session_id)
            self.last_error = None
            confirmed = is_payment_confirmed(self.result)
        except BookingApiError as e:
            self.last_error = e.message
            confirmed = False

        if confirmed:
            self.state = CONFIRMED
        elif self.attempts >= self.max_attempts:
            self.state = FAILED
            print(f"  ⚠️  Payment {self.session_id} not confirmed after {self.attempts} attempts: {self.last_error or 'still processing'}")
        else:
            self.state = RETRYING
            print(f"  ℹ️  Payment {self.session_id} not confirmed yet (attempt {self.attempts}/{self.max_attempts})")
        return self.state

    def run(self):
        while not self.done:
            self.attempt()
            if not self.done:
                self.sleep(self.delay_seconds)
        return self

    @property
    def message(self):
        if self.state == CONFIRMED:
            return "Booking confirmed"
        if self.state == FAILED:
            return PROCESSING_MESSAGE
        return "Confirming payment..."

    def to_dict(self):
        return {
            "sessionId": self.session_id,
            "state": self.state,
            "attempts": self.attempts,
            "message": self.message,
            "result": self.result if self.state == CONFIRMED else None,
            "retryAfter": self.delay_seconds if self.state == RETRYING else None,
        }
