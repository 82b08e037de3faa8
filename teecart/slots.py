"""
Tee time slots as returned by /api/slots/search.

The backend relays Zest Golf, Golfmanager and TeeOne responses more or less as
the providers send them, so field names come in camelCase or PascalCase.
normalize_slot() maps them onto one shape:

    {
        "id": "gm-1234",
        "teeTime": "2025-06-01T09:10:00",
        "greenFee": 85.0,
        "currency": "EUR",
        "slotsAvailable": 4,
        "holes": 18,
        "packages": [...],
        "addOns": [...],
        "source": "golfmanager"
    }
"""

from teecart.timeutils import calendar_day, parse_timestamp

MORNING = "morning"
MIDDAY = "midday"
AFTERNOON = "afternoon"
TWILIGHT = "twilight"

PERIODS = (MORNING, MIDDAY, AFTERNOON, TWILIGHT)
PERIOD_LABELS = {
    MORNING: "Morning",
    MIDDAY: "Midday",
    AFTERNOON: "Afternoon",
    TWILIGHT: "Twilight",
}


def _first(raw, *keys, default=None):
    for k in keys:
        v = raw.get(k)
        if v is not None and v != "":
            return v
    return default


def normalize_slot(raw, provider_type=""):
    """Normalize one provider slot; None if it has no usable tee time"""
    tee_time = _first(raw, "teeTime", "TeeTime", "time", "Time", "datetime")
    if not tee_time:
        return None
    try:
        parse_timestamp(tee_time)
    except ValueError:
        return None

    try:
        green_fee = float(_first(raw, "greenFee", "GreenFee", "price", "Price", "totalPrice", "TotalPrice", default=0))
        available = int(_first(raw, "slotsAvailable", "SlotsAvailable", "playersAvailable", "maxPlayers", "MaxPlayers", default=4))
        holes = int(_first(raw, "holes", "Holes", default=18))
    except (ValueError, TypeError):
        return None

    return {
        "id": _first(raw, "id", "Id", "ID", default=f"{provider_type}-{tee_time}"),
        "teeTime": tee_time,
        "greenFee": green_fee,
        "currency": _first(raw, "currency", "Currency", default="EUR"),
        "slotsAvailable": available,
        "holes": holes,
        "packages": _first(raw, "packages", "Packages", "products", "Products", default=[]),
        "addOns": _first(raw, "addOns", "AddOns", "extras", "Extras", default=[]),
        "source": _first(raw, "source", "Source", default=provider_type),
    }


def normalize_slots(raw_slots, provider_type=""):
    slots = []
    for raw in raw_slots or []:
        if not isinstance(raw, dict):
            continue
        slot = normalize_slot(raw, provider_type)
        if slot:
            slots.append(slot)
    return slots


def get_time_period(tee_time):
    hour = parse_timestamp(tee_time).hour
    if hour < 11:
        return MORNING
    if hour < 14:
        return MIDDAY
    if hour < 17:
        return AFTERNOON
    return TWILIGHT


def _by_tee_time(slot):
    return parse_timestamp(slot["teeTime"]).timestamp()


def group_slots_by_period(slots):
    groups = {period: [] for period in PERIODS}
    for slot in slots:
        groups[get_time_period(slot["teeTime"])].append(slot)
    for group in groups.values():
        group.sort(key=_by_tee_time)
    return groups


def group_slots_by_date(slots):
    """{"YYYY-MM-DD": [slots...]} in first-seen date order, each day sorted"""
    groups = {}
    for slot in slots:
        groups.setdefault(calendar_day(slot["teeTime"]), []).append(slot)
    for group in groups.values():
        group.sort(key=_by_tee_time)
    return groups


def get_available_dates(slots):
    return {calendar_day(slot["teeTime"]) for slot in slots}


def get_cheapest_slot(slots):
    if not slots:
        return None
    # first cheapest wins on ties
    cheapest = slots[0]
    for slot in slots[1:]:
        if slot["greenFee"] < cheapest["greenFee"]:
            cheapest = slot
    return cheapest


def normalize_search_results(results):
    """
    Normalize a /api/slots/search response: a list of
    {"courseId", "courseName", "distanceKm", "providerType", "slots": [...]}.
    Adds "cheapestFee" per course (None when there are no slots).
    """
    courses = []
    for course in results or []:
        if not isinstance(course, dict):
            continue
        slots = normalize_slots(course.get("slots"), course.get("providerType", ""))
        cheapest = get_cheapest_slot(slots)
        courses.append({
            **course,
            "slots": slots,
            "cheapestFee": cheapest["greenFee"] if cheapest else None,
        })
    return courses
