import pytest

from teecart.checkout import (
    CONFIRMED,
    FAILED,
    PENDING,
    PROCESSING_MESSAGE,
    RETRYING,
    CheckoutError,
    PaymentConfirmation,
    build_booking_request,
    build_checkout_request,
    is_payment_confirmed,
)
from teecart.client import BookingApiError

CUSTOMER = {"name": " Ana García ", "email": "ana@example.com", "phone": "+34 600 000 000"}


def test_build_checkout_request(make_item, buggy_addon):
    items = [
        make_item("A", "2025-06-01T08:00:00", total_price=140.0, add_ons=[buggy_addon]),
        make_item("B", "2025-06-02T10:00:00", total_price=90.0),
    ]

    payload = build_checkout_request(items, CUSTOMER)

    assert payload["totalAmount"] == 230.0
    assert payload["customerInfo"] == {"name": "Ana García", "email": "ana@example.com", "phone": "+34 600 000 000"}
    line = payload["items"][0]
    assert line == {
        "courseId": "A",
        "courseName": "Course A",
        "date": "2025-06-01",
        "time": "2025-06-01T08:00:00",
        "players": 2,
        "packageId": 1,
        "packageName": "Greenfee",
        "addOns": [{"id": 9, "name": "Buggy", "price": 40.0, "quantity": 1, "totalPrice": 40.0}],
        "totalPrice": 140.0,
        "providerType": "golfmanager",
    }


def test_checkout_needs_items():
    with pytest.raises(CheckoutError, match="empty"):
        build_checkout_request([], CUSTOMER)


@pytest.mark.parametrize("customer", [None, {}, {"name": "Ana"}, {"email": "ana@example.com"}, {"name": " ", "email": "x@y"}])
def test_checkout_needs_name_and_email(make_item, customer):
    with pytest.raises(CheckoutError, match="name and email"):
        build_checkout_request([make_item()], customer)


@pytest.mark.parametrize("result,confirmed", [
    ({"success": True}, True),
    ({"status": "confirmed"}, True),
    ({"payment_status": "paid"}, True),
    ({"status": "processing"}, False),
    ({"success": False}, False),
    (None, False),
])
def test_is_payment_confirmed(result, confirmed):
    assert is_payment_confirmed(result) is confirmed


class FakeBackend:

    def __init__(self, answers):
        self.answers = list(answers)
        self.calls = []

    def __call__(self, session_id):
        self.calls.append(session_id)
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


def test_confirms_on_first_attempt():
    sleeps = []
    backend = FakeBackend([{"success": True, "bookingIds": [1]}])

    confirmation = PaymentConfirmation("cs_1", backend, max_attempts=3, delay_seconds=2, sleep=sleeps.append).run()

    assert confirmation.state == CONFIRMED
    assert confirmation.attempts == 1
    assert sleeps == []
    assert confirmation.to_dict()["result"] == {"success": True, "bookingIds": [1]}


def test_retries_until_webhook_lands():
    sleeps = []
    backend = FakeBackend([
        BookingApiError("Booking not found", status_code=404),
        {"status": "processing"},
        {"success": True},
    ])

    confirmation = PaymentConfirmation("cs_2", backend, max_attempts=5, delay_seconds=2, sleep=sleeps.append).run()

    assert confirmation.state == CONFIRMED
    assert confirmation.attempts == 3
    assert sleeps == [2, 2]
    assert backend.calls == ["cs_2"] * 3


def test_gives_up_after_max_attempts():
    sleeps = []
    backend = FakeBackend([BookingApiError("HTTP 500", status_code=500)] * 3)

    confirmation = PaymentConfirmation("cs_3", backend, max_attempts=3, delay_seconds=1.5, sleep=sleeps.append).run()

    assert confirmation.state == FAILED
    assert confirmation.attempts == 3
    assert sleeps == [1.5, 1.5]
    assert confirmation.message == PROCESSING_MESSAGE
    assert confirmation.last_error == "HTTP 500"
    assert confirmation.to_dict()["result"] is None


def test_step_by_step_states():
    backend = FakeBackend([{"status": "processing"}, {"status": "processing"}])
    confirmation = PaymentConfirmation("cs_4", backend, max_attempts=2, sleep=lambda s: None)

    assert confirmation.state == PENDING
    assert confirmation.attempt() == RETRYING
    assert confirmation.attempt() == FAILED
    # finished confirmations don't call the backend again
    assert confirmation.attempt() == FAILED
    assert len(backend.calls) == 2


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        PaymentConfirmation("cs", lambda s: None, max_attempts=0)


def test_resumes_from_earlier_attempts():
    backend = FakeBackend([{"status": "processing"}])
    confirmation = PaymentConfirmation("cs_5", backend, max_attempts=3, delay_seconds=2, attempts=1)

    assert confirmation.state == RETRYING
    assert confirmation.attempt() == RETRYING
    assert confirmation.attempts == 2
    assert confirmation.to_dict()["retryAfter"] == 2


def test_resumed_confirmation_fails_on_last_attempt():
    backend = FakeBackend([BookingApiError("not found", status_code=404)])
    confirmation = PaymentConfirmation("cs_6", backend, max_attempts=3, attempts=2)

    assert confirmation.attempt() == FAILED
    assert confirmation.to_dict()["retryAfter"] is None


@pytest.mark.parametrize("attempts", [-1, 3])
def test_resume_count_must_leave_an_attempt(attempts):
    with pytest.raises(ValueError):
        PaymentConfirmation("cs", lambda s: None, max_attempts=3, attempts=attempts)


BOOKING = {
    "courseId": "naranjos",
    "teeTime": "2025-06-01T09:00:00Z",
    "players": 2,
    "customerName": " Ana García ",
    "customerEmail": "ana@example.com",
}


def test_build_booking_request():
    payload = build_booking_request(BOOKING)

    assert payload == {
        "courseId": "naranjos",
        "teeTime": "2025-06-01T09:00:00Z",
        "players": 2,
        "customerName": "Ana García",
        "customerEmail": "ana@example.com",
        "customerPhone": "",
        "status": "PENDING",
    }


@pytest.mark.parametrize("change", [
    {"courseId": None},
    {"teeTime": "tomorrow morning"},
    {"teeTime": 900},
    {"players": 0},
    {"players": "2"},
    {"customerName": ""},
    {"customerEmail": None},
])
def test_booking_request_validation(change):
    with pytest.raises(CheckoutError):
        build_booking_request({**BOOKING, **change})
