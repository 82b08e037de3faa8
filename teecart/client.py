"""
REST client for the booking backend.

Endpoints used:
    GET  /api/courses
    GET  /api/slots/search
    GET  /api/rate-periods?courseId=
    POST /api/bookings
    POST /api/checkout/create-session
    GET  /api/checkout-session/{id}
    POST /api/confirm-payment
"""

from urllib.parse import quote

import requests

from teecart.config import BACKEND_TIMEOUT, BACKEND_URL


class BookingApiError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class BookingApiClient:

    def __init__(self, base_url=BACKEND_URL, timeout=BACKEND_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })
        self.auth_token = None

    def set_auth_token(self, token):
        self.auth_token = token

    def request(self, method, endpoint, params=None, json=None):
        """Call the backend and return the decoded JSON body; raises BookingApiError"""
        url = f"{self.base_url}{endpoint}"
        headers = {}
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"

        try:
            resp = self.session.request(method, url, params=params, json=json,
                                        headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise BookingApiError(f"Request to {endpoint} failed: {e}") from e

        if not resp.ok:
            message = f"HTTP {resp.status_code}"
            try:
                body = resp.json()
                if isinstance(body, dict):
                    message = body.get("message") or body.get("error") or message
            except ValueError:
                pass
            raise BookingApiError(message, status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as e:
            raise BookingApiError(f"Invalid JSON from {endpoint}", status_code=resp.status_code) from e

    def get(self, endpoint, params=None):
        return self.request("GET", endpoint, params=params)

    def post(self, endpoint, body):
        return self.request("POST", endpoint, json=body)

    # -------------------------------------------------------------------------
    # endpoints
    # -------------------------------------------------------------------------
    def get_courses(self):
        return self.get("/api/courses")

    def search_slots(self, date=None, players=None, lat=None, lng=None, radius_km=None,
                     from_time=None, to_time=None, holes=None):
        params = {
            "date": date,
            "players": players,
            "lat": lat,
            "lng": lng,
            "radiusKm": radius_km,
            "fromTime": from_time,
            "toTime": to_time,
            "holes": holes,
        }
        return self.get("/api/slots/search", {k: v for k, v in params.items() if v is not None})

    def get_rate_periods(self, course_id):
        return self.get("/api/rate-periods", {"courseId": course_id})

    def create_booking(self, booking):
        return self.post("/api/bookings", booking)

    def create_checkout_session(self, checkout_request):
        return self.post("/api/checkout/create-session", checkout_request)

    def get_checkout_session(self, session_id):
        return self.get(f"/api/checkout-session/{quote(str(session_id), safe='')}")

    def confirm_payment(self, session_id):
        return self.post("/api/confirm-payment", {"sessionId": session_id})
