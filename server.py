"""
TEE TIME CART - Golf tee time storefront
Multi-course booking cart with package selection and hosted checkout.

Tee time inventory comes from the booking backend, which talks to:
- Zest Golf
- Golfmanager
- TeeOne

Single Flask app. Each visitor's cart lives in its own JSON file, keyed by a
visitor id kept in the Flask session, the way a browser keeps it in local
storage. Payment runs through the backend's hosted checkout.
"""

import uuid

from flask import Flask, jsonify, request, session
from flask_cors import CORS

from teecart.cart import BookingCart
from teecart.checkout import (
    CONFIRMED,
    RETRYING,
    CheckoutError,
    PaymentConfirmation,
    build_booking_request,
    build_checkout_request,
)
from teecart.client import BookingApiClient, BookingApiError
from teecart.config import (
    BACKEND_URL,
    CART_DATA_DIR,
    CART_STORAGE_KEY,
    EARLY_BIRD_END_TIME,
    PAYMENT_CONFIRM_DELAY_SECONDS,
    PAYMENT_CONFIRM_MAX_ATTEMPTS,
    PORT,
    SECRET_KEY,
    TWILIGHT_START_TIME,
)
from teecart.packages import PackageWindows, display_packages
from teecart.selection import (
    BlockingConflictError,
    ConflictAcknowledgementRequired,
    SelectionError,
    add_selection_to_cart,
)
from teecart.slots import group_slots_by_period, normalize_search_results
from teecart.storage import FileCartStorage
from teecart.timeutils import parse_timestamp

# Fields a client may change on an existing cart item (JSON name -> attribute)
UPDATABLE_FIELDS = {
    "playerNames": "player_names",
    "courseName": "course_name",
}

cart_storage = FileCartStorage(CART_DATA_DIR)
api_client = BookingApiClient(BACKEND_URL)


# =============================================================================
# FLASK APP
# =============================================================================
app = Flask(__name__)
app.secret_key = SECRET_KEY
if app.secret_key == "change-me-set-SECRET_KEY-env-var":
    print("⚠️  WARNING: Using default SECRET_KEY, set SECRET_KEY env var in production")
CORS(app, supports_credentials=True)


def visitor_cart():
    """The current visitor's cart; a visitor id is issued on first use"""
    visitor_id = session.get('visitor_id')
    if not visitor_id:
        visitor_id = uuid.uuid4().hex
        session['visitor_id'] = visitor_id
    return BookingCart(cart_storage, key=f"{CART_STORAGE_KEY}-{visitor_id}")


def json_body():
    """The request's JSON object, {} when there is no body, None when it isn't an object"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def error_response(message, status, **extra):
    return jsonify({"error": message, **extra}), status


def conflict_response(error, requires_ack):
    return error_response(
        str(error), 409,
        conflicts=[c.to_dict() for c in error.conflicts],
        requiresAcknowledgement=requires_ack,
    )


# --- STATUS ---
@app.route('/api/status')
def status():
    return jsonify({
        "status": "ok",
        "backendUrl": BACKEND_URL,
        "earlyBirdEndTime": EARLY_BIRD_END_TIME,
        "twilightStartTime": TWILIGHT_START_TIME,
    })


# --- BACKEND PASSTHROUGH ---
@app.route('/api/courses')
def get_courses():
    try:
        return jsonify(api_client.get_courses())
    except BookingApiError as e:
        print(f"  ⚠️  Course listing failed: {e.message}")
        return error_response(e.message, 502)


@app.route('/api/rate-periods')
def get_rate_periods():
    course_id = request.args.get("courseId")
    if not course_id:
        return error_response("courseId is required", 400)
    try:
        return jsonify(api_client.get_rate_periods(course_id))
    except BookingApiError as e:
        print(f"  ⚠️  Rate periods for {course_id} failed: {e.message}")
        return error_response(e.message, 502)


@app.route('/api/slots/search')
def search_slots():
    """Search tee times across courses; slots come back normalized and grouped by period"""
    try:
        results = api_client.search_slots(
            date=request.args.get("date"),
            players=request.args.get("players", type=int),
            lat=request.args.get("lat", type=float),
            lng=request.args.get("lng", type=float),
            radius_km=request.args.get("radiusKm", type=float),
            from_time=request.args.get("fromTime"),
            to_time=request.args.get("toTime"),
            holes=request.args.get("holes", type=int),
        )
    except BookingApiError as e:
        print(f"  ⚠️  Slot search failed: {e.message}")
        return error_response(e.message, 502)

    courses = normalize_search_results(results if isinstance(results, list) else [])
    for course in courses:
        course["slotsByPeriod"] = group_slots_by_period(course["slots"])
    return jsonify({"courses": courses, "count": len(courses)})


# --- PACKAGES ---
@app.route('/api/packages/eligible', methods=['POST'])
def eligible_packages():
    """Packages to offer for a tee time: {"teeTime", "packages", "contractSettings"?}"""
    data = json_body()
    if data is None:
        return error_response("Request body must be a JSON object", 400)
    tee_time = data.get("teeTime")
    if not tee_time:
        return error_response("teeTime is required", 400)
    offered = data.get("packages") or []
    settings = data.get("contractSettings")
    if not isinstance(offered, list) or not all(isinstance(p, dict) for p in offered):
        return error_response("packages must be a list of objects", 400)
    if settings is not None and not isinstance(settings, dict):
        return error_response("contractSettings must be an object", 400)

    windows = PackageWindows.from_contract_settings(settings)
    try:
        packages = display_packages(offered, tee_time, windows)
    except ValueError as e:
        return error_response(str(e), 400)
    return jsonify({"packages": packages, "count": len(packages)})


# --- CART ---
@app.route('/api/cart')
def get_cart():
    return jsonify(visitor_cart().to_dict())


@app.route('/api/cart', methods=['DELETE'])
def clear_cart():
    cart = visitor_cart()
    cart.clear_cart()
    return jsonify(cart.to_dict())


@app.route('/api/cart/conflicts')
def cart_conflicts():
    course_id = request.args.get("courseId")
    date_str = request.args.get("date")
    time_str = request.args.get("time")
    if not course_id or not date_str or not time_str:
        return error_response("courseId, date and time are required", 400)
    try:
        parse_timestamp(time_str)
    except ValueError:
        return error_response(f"Invalid time: {time_str}", 400)

    conflicts = visitor_cart().check_conflicts(course_id, date_str, time_str)
    return jsonify({
        "conflicts": [c.to_dict() for c in conflicts],
        "blocking": any(c.blocking for c in conflicts),
    })


@app.route('/api/cart/items', methods=['POST'])
def add_cart_item():
    """
    Add a package selection to the cart.

    Body: {"course": {...}, "teeTime": {...}, "date": "YYYY-MM-DD",
           "packageId": ..., "addOnQuantities": {id: qty},
           "acknowledgeConflicts": bool, "playerNames": [...]}
    """
    data = json_body()
    if data is None:
        return error_response("Request body must be a JSON object", 400)
    course = data.get("course")
    tee_time = data.get("teeTime")
    date_str = data.get("date")
    if not isinstance(course, dict) or not isinstance(tee_time, dict) or not date_str:
        return error_response("course, teeTime and date are required", 400)
    if not course.get("courseId") or not tee_time.get("time"):
        return error_response("course.courseId and teeTime.time are required", 400)

    cart = visitor_cart()
    try:
        item = add_selection_to_cart(
            cart, course, tee_time, date_str,
            package_id=data.get("packageId"),
            addon_quantities=data.get("addOnQuantities"),
            acknowledged=bool(data.get("acknowledgeConflicts")),
            player_names=data.get("playerNames"),
        )
    except BlockingConflictError as e:
        return conflict_response(e, requires_ack=False)
    except ConflictAcknowledgementRequired as e:
        return conflict_response(e, requires_ack=True)
    except (SelectionError, ValueError, TypeError) as e:
        return error_response(str(e), 400)

    return jsonify({"item": item.to_dict(), "cart": cart.to_dict()}), 201


@app.route('/api/cart/items/<item_id>', methods=['PATCH'])
def update_cart_item(item_id):
    data = json_body()
    if data is None:
        return error_response("Request body must be a JSON object", 400)
    unknown = sorted(set(data) - set(UPDATABLE_FIELDS))
    if unknown:
        return error_response(f"Fields can't be updated: {', '.join(unknown)}", 400)

    cart = visitor_cart()
    try:
        cart.update_item(item_id, **{UPDATABLE_FIELDS[k]: v for k, v in data.items()})
    except ValueError as e:
        return error_response(str(e), 400)
    return jsonify(cart.to_dict())


@app.route('/api/cart/items/<item_id>', methods=['DELETE'])
def remove_cart_item(item_id):
    cart = visitor_cart()
    cart.remove_item(item_id)
    return jsonify(cart.to_dict())


# --- CHECKOUT ---
@app.route('/api/checkout', methods=['POST'])
def create_checkout():
    """Create a hosted checkout session for the whole cart; returns its url"""
    data = json_body()
    if data is None:
        return error_response("Request body must be a JSON object", 400)
    cart = visitor_cart()
    try:
        payload = build_checkout_request(cart.items, data.get("customerInfo"))
    except CheckoutError as e:
        return error_response(str(e), 400)

    try:
        checkout_session = api_client.create_checkout_session(payload)
    except BookingApiError as e:
        print(f"  ⚠️  Checkout session failed: {e.message}")
        return error_response(e.message, 502)

    return jsonify({
        "url": checkout_session.get("url"),
        "sessionId": checkout_session.get("sessionId") or checkout_session.get("id"),
        "totalAmount": payload["totalAmount"],
    })


@app.route('/api/bookings', methods=['POST'])
def create_booking():
    """
    Request a single tee time without paying up front.

    Body: {"courseId", "teeTime", "players", "customerName", "customerEmail", "customerPhone"?}
    """
    data = json_body()
    if data is None:
        return error_response("Request body must be a JSON object", 400)
    try:
        payload = build_booking_request(data)
    except CheckoutError as e:
        return error_response(str(e), 400)

    try:
        booking = api_client.create_booking(payload)
    except BookingApiError as e:
        print(f"  ⚠️  Booking request failed: {e.message}")
        return error_response(e.message, 502)

    print(f"  ✅ Booking request for {payload['courseId']} at {payload['teeTime']}")
    return jsonify(booking), 201


@app.route('/api/checkout/confirm', methods=['POST'])
def confirm_checkout():
    """
    Confirm the payment after the hosted checkout, one attempt per request.

    While the state is "retrying" the page calls again after retryAfter
    seconds. Attempts so far are kept in the Flask session per checkout
    session id. The cart is emptied once the payment is confirmed.
    """
    data = json_body()
    if data is None:
        return error_response("Request body must be a JSON object", 400)
    session_id = data.get("sessionId")
    if not session_id:
        return error_response("sessionId is required", 400)

    pending = dict(session.get('payment_attempts') or {})
    previous = min(int(pending.get(session_id, 0)), PAYMENT_CONFIRM_MAX_ATTEMPTS - 1)
    confirmation = PaymentConfirmation(
        session_id,
        api_client.confirm_payment,
        max_attempts=PAYMENT_CONFIRM_MAX_ATTEMPTS,
        delay_seconds=PAYMENT_CONFIRM_DELAY_SECONDS,
        attempts=previous,
    )
    confirmation.attempt()

    if confirmation.state == RETRYING:
        pending[session_id] = confirmation.attempts
    else:
        pending.pop(session_id, None)
    session['payment_attempts'] = pending

    if confirmation.state == CONFIRMED:
        visitor_cart().clear_cart()
    return jsonify(confirmation.to_dict())


if __name__ == '__main__':
    print(f"\n⛳ Tee Time Cart starting on port {PORT}")
    print(f"🔌 Booking backend: {BACKEND_URL}")
    print(f"🛒 Carts stored in: {CART_DATA_DIR}")
    print(f"⏰ Early bird until {EARLY_BIRD_END_TIME}, twilight from {TWILIGHT_START_TIME}")
    app.run(host='0.0.0.0', port=PORT, debug=False)
