"""
The booking cart: an ordered list of CartItems mirrored to storage.

A cart is built per visitor with an explicit storage and key:

    cart = BookingCart(FileCartStorage(CART_DATA_DIR), key="...:visitor-id")
    cart.add_item(item)
    cart.check_conflicts("course-2", "2025-06-01", "2025-06-01T11:30:00")

Every mutation writes the whole list back before returning.
"""

import dataclasses

from teecart.config import CART_STORAGE_KEY
from teecart.conflicts import check_conflicts
from teecart.models import CartItem

# Fields that identify an item; update_item leaves them alone
KEY_FIELDS = {"id", "course_id", "time"}


class BookingCart:

    def __init__(self, storage, key=CART_STORAGE_KEY):
        self.storage = storage
        self.key = key
        self._items = self._load()

    # -------------------------------------------------------------------------
    # persistence
    # -------------------------------------------------------------------------
    def _load(self):
        """Read the stored list; anything unreadable counts as an empty cart"""
        try:
            data = self.storage.load(self.key)
            if data is None:
                return []
            if not isinstance(data, list):
                raise ValueError(f"expected a list, got {type(data).__name__}")
            return [CartItem.from_dict(d) for d in data]
        except (ValueError, TypeError, KeyError, OSError) as e:
            print(f"  ⚠️  Failed to load cart {self.key}: {e}")
            return []

    def _save(self):
        try:
            self.storage.save(self.key, [item.to_dict() for item in self._items])
        except (OSError, ValueError, TypeError) as e:
            print(f"  ⚠️  Failed to save cart {self.key}: {e}")

    # -------------------------------------------------------------------------
    # mutations
    # -------------------------------------------------------------------------
    def add_item(self, item):
        """Append item, or replace the item with the same (course_id, time) in place"""
        for i, existing in enumerate(self._items):
            if existing.key == item.key:
                self._items[i] = item
                break
        else:
            self._items.append(item)
        self._save()

    def remove_item(self, item_id):
        remaining = [item for item in self._items if item.id != item_id]
        if len(remaining) == len(self._items):
            return
        self._items = remaining
        self._save()

    def update_item(self, item_id, **updates):
        """
        Merge field updates into the item with item_id.

        Unknown field names raise TypeError; key fields and invalid values
        raise ValueError.
        """
        locked = sorted(KEY_FIELDS & set(updates))
        if locked:
            raise ValueError(f"Can't change {', '.join(locked)} of a cart item")
        for i, item in enumerate(self._items):
            if item.id == item_id:
                self._items[i] = dataclasses.replace(item, **updates)
                self._save()
                return

    def clear_cart(self):
        self._items = []
        self._save()

    # -------------------------------------------------------------------------
    # queries
    # -------------------------------------------------------------------------
    @property
    def items(self):
        return list(self._items)

    def get_total_price(self):
        return sum(item.total_price for item in self._items)

    def get_item_count(self):
        return len(self._items)

    def has_item(self, course_id, time):
        return any(item.key == (course_id, time) for item in self._items)

    def check_conflicts(self, course_id, date, time):
        return check_conflicts(self._items, course_id, date, time)

    def to_dict(self):
        return {
            "items": [item.to_dict() for item in self._items],
            "count": self.get_item_count(),
            "totalPrice": self.get_total_price(),
        }
