"""
Turning a package/add-on selection into a cart item.

This is the booking dialog flow: the visitor picks one of the displayed
packages for a tee time, optionally adds extras, and confirms. Before the item
goes into the cart, conflicts are gated: a time overlap always blocks, a
same-course-same-day conflict needs an explicit acknowledgement.

Add-on pricing: buggies are shared by two players, so per-buggy extras are
counted in units of ceil(players / 2); everything else is per player.
"""

import math
from datetime import datetime

from teecart.config import MAX_PLAYERS_PER_TEE
from teecart.models import CartAddOn, CartItem, CartPackage
from teecart.packages import PackageWindows, display_packages

BUGGY = "buggy"
TROLLEY = "trolley"
CLUBS = "clubs"
OTHER = "other"


class SelectionError(ValueError):
    pass


class BlockingConflictError(SelectionError):
    def __init__(self, conflicts):
        self.conflicts = conflicts
        super().__init__(conflicts[0].message if conflicts else "Conflicting booking in cart")


class ConflictAcknowledgementRequired(SelectionError):
    def __init__(self, conflicts):
        self.conflicts = conflicts
        super().__init__(conflicts[0].message if conflicts else "Please confirm this booking")


# =============================================================================
# ADD-ONS
# =============================================================================
def addon_category(addon):
    name = (addon.get("name") or "").lower()
    if "buggy" in name or "cart" in name:
        return BUGGY
    if "trolley" in name or "trundler" in name:
        return TROLLEY
    if "club" in name or "rental" in name:
        return CLUBS
    return OTHER


def is_per_buggy(addon):
    return (
        addon.get("pricingType") == "per-buggy"
        or bool(addon.get("includesBuggy"))
        or addon_category(addon) == BUGGY
    )


def addon_unit_count(addon, players):
    """How many of this add-on a group needs: one per buggy, or one per player"""
    if is_per_buggy(addon):
        return math.ceil(players / 2)
    return players


def addon_total(addon, quantity):
    return float(addon.get("price") or 0) * quantity


def package_includes_buggy(package):
    if not package:
        return False
    return bool(package.get("includesBuggy")) or "buggy" in (package.get("name") or "").lower()


def addon_conflict_reason(addon, package, addons, quantities):
    """Why addon can't be combined with the current selection, or None"""
    category = addon_category(addon)
    includes_buggy = package_includes_buggy(package)

    if category == BUGGY and includes_buggy:
        return "Already included in package"

    def selected(cat):
        return any(
            addon_category(a) == cat and quantities.get(str(a.get("id")), 0) > 0
            for a in addons
        )

    if category == BUGGY and selected(TROLLEY):
        return "Cannot combine with trolley"
    if category == TROLLEY and (includes_buggy or selected(BUGGY)):
        return "Buggy already selected"
    return None


def set_addon_quantity(addons, quantities, addon_id, quantity, players):
    """
    Return a new quantities map with addon_id set to quantity.

    Quantities are capped at the add-on's unit count. Choosing a buggy drops
    any trolley and vice versa.
    """
    addon_id = str(addon_id)
    addon = next((a for a in addons if str(a.get("id")) == addon_id), None)
    if addon is None:
        return dict(quantities)

    updated = dict(quantities)
    if quantity <= 0:
        updated.pop(addon_id, None)
        return updated

    updated[addon_id] = min(quantity, addon_unit_count(addon, players))

    category = addon_category(addon)
    exclusive = {BUGGY: TROLLEY, TROLLEY: BUGGY}.get(category)
    if exclusive:
        for other in addons:
            if addon_category(other) == exclusive:
                updated.pop(str(other.get("id")), None)
    return updated


# =============================================================================
# CONFLICT GATE
# =============================================================================
def gate_conflicts(conflicts, acknowledged=False):
    """Raise if the conflicts stop the item from being added"""
    blocking = [c for c in conflicts if c.blocking]
    if blocking:
        raise BlockingConflictError(blocking)
    if conflicts and not acknowledged:
        raise ConflictAcknowledgementRequired(conflicts)


# =============================================================================
# CART ITEM
# =============================================================================
def package_price(package, tee_time):
    price = package.get("price")
    if price is None:
        price = tee_time.get("price")
    return float(price or 0)


def build_cart_item(course, tee_time, date, package_id, addon_quantities=None,
                    windows=None, now=None, player_names=None):
    """
    Build the CartItem for a confirmed selection.

    course:    {"courseId", "courseName", "providerType", "contractSettings"?}
    tee_time:  {"time", "players", "price"?, "packages": [...], "addOns": [...]}
    addon_quantities: {addon id (str): quantity}
    """
    if package_id in (None, ""):
        raise SelectionError("Please select a package")

    if windows is None:
        windows = PackageWindows.from_contract_settings(course.get("contractSettings"))
    time = tee_time["time"]
    players = tee_time.get("players")
    if isinstance(players, bool) or not isinstance(players, int) or not 1 <= players <= MAX_PLAYERS_PER_TEE:
        raise SelectionError(f"players must be between 1 and {MAX_PLAYERS_PER_TEE}")

    offered = display_packages(tee_time.get("packages") or [], time, windows)
    package = next((p for p in offered if str(p.get("id")) == str(package_id)), None)
    if package is None:
        raise SelectionError(f"Package {package_id} is not available for this tee time")

    addons = tee_time.get("addOns") or []
    if addon_quantities is not None and not isinstance(addon_quantities, dict):
        raise SelectionError("addOnQuantities must map add-on ids to quantities")
    quantities = {str(k): int(v) for k, v in (addon_quantities or {}).items() if int(v) > 0}
    chosen = []
    for addon_id, quantity in quantities.items():
        addon = next((a for a in addons if str(a.get("id")) == addon_id), None)
        if addon is None:
            raise SelectionError(f"Unknown add-on {addon_id}")
        reason = addon_conflict_reason(addon, package, addons, quantities)
        if reason:
            raise SelectionError(f"{addon.get('name')}: {reason}")
        chosen.append((addon, min(quantity, addon_unit_count(addon, players))))

    unit_price = package_price(package, tee_time)
    cart_addons = [
        CartAddOn(
            id=addon.get("id"),
            name=addon.get("name", ""),
            price=float(addon.get("price") or 0),
            quantity=quantity,
            total_price=addon_total(addon, quantity),
        )
        for addon, quantity in chosen
    ]
    total = unit_price * players + sum(a.total_price for a in cart_addons)

    now = now or datetime.now()
    return CartItem(
        id=f"{course['courseId']}-{time}-{int(now.timestamp() * 1000)}",
        course_id=str(course["courseId"]),
        course_name=course.get("courseName", ""),
        date=date,
        time=time,
        players=players,
        package=CartPackage(
            id=package.get("id"),
            name=package.get("name", ""),
            price=unit_price,
            includes_buggy=bool(package.get("includesBuggy")) or any(
                a.get("includesBuggy") or addon_category(a) == BUGGY for a, _ in chosen),
            includes_lunch=bool(package.get("includesLunch")) or any(
                a.get("includesLunch") for a, _ in chosen),
        ),
        add_ons=cart_addons,
        total_price=total,
        provider_type=course.get("providerType", ""),
        player_names=player_names,
    )


def add_selection_to_cart(cart, course, tee_time, date, package_id, addon_quantities=None,
                          acknowledged=False, windows=None, now=None, player_names=None):
    """Gate conflicts, build the item and add it to the cart"""
    conflicts = cart.check_conflicts(str(course["courseId"]), date, tee_time["time"])
    gate_conflicts(conflicts, acknowledged)
    item = build_cart_item(course, tee_time, date, package_id, addon_quantities,
                           windows=windows, now=now, player_names=player_names)
    cart.add_item(item)
    return item
