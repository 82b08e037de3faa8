import pytest

from teecart.cart import BookingCart
from teecart.models import CartAddOn, CartItem, CartPackage
from teecart.storage import MemoryCartStorage


@pytest.fixture
def storage():
    return MemoryCartStorage()


@pytest.fixture
def cart(storage):
    return BookingCart(storage, key="test-cart")


@pytest.fixture
def make_item():
    counter = {"n": 0}

    def _make(course_id="A", time="2025-06-01T09:00:00", date=None, total_price=100.0,
              players=2, course_name=None, add_ons=None, item_id=None):
        counter["n"] += 1
        return CartItem(
            id=item_id or f"{course_id}-{time}-{counter['n']}",
            course_id=course_id,
            course_name=course_name or f"Course {course_id}",
            date=date or time.split("T")[0],
            time=time,
            players=players,
            package=CartPackage(id=1, name="Greenfee", price=50.0, includes_buggy=False, includes_lunch=False),
            add_ons=add_ons if add_ons is not None else [],
            total_price=total_price,
            provider_type="golfmanager",
        )

    return _make


@pytest.fixture
def buggy_addon():
    return CartAddOn(id=9, name="Buggy", price=40.0, quantity=1, total_price=40.0)
