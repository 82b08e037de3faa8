"""
Scheduling conflicts between a candidate tee time and the items in a cart.

Two rules, checked against every item on the same calendar day:

- same course, same day: advisory. Two rounds at one course on one day is
  unusual but legitimate, so the visitor may acknowledge and continue.
- different course, tee times less than MIN_HOURS_BETWEEN_ROUNDS apart:
  blocking. The visitor cannot finish one round and travel to the next.

The buffer is a fixed constant. A short 9-hole round followed by a tee time
just over four hours later elsewhere is never flagged.
"""

from dataclasses import dataclass

from teecart.config import MIN_HOURS_BETWEEN_ROUNDS
from teecart.models import CartItem
from teecart.timeutils import calendar_day, format_clock, hours_between

SAME_COURSE_SAME_DAY = "same-course-same-day"
TIME_OVERLAP = "time-overlap"


@dataclass(frozen=True)
class BookingConflict:
    type: str
    existing_item: CartItem
    message: str

    @property
    def blocking(self):
        return self.type == TIME_OVERLAP

    def to_dict(self):
        return {
            "type": self.type,
            "blocking": self.blocking,
            "existingItem": self.existing_item.to_dict(),
            "message": self.message,
        }


def check_conflicts(items, course_id, date, time):
    """Return every conflict the candidate (course_id, date, time) has with items, in cart order"""
    conflicts = []
    check_day = calendar_day(date)

    for item in items:
        if calendar_day(item.date) != check_day:
            continue

        if item.course_id == course_id:
            conflicts.append(BookingConflict(
                type=SAME_COURSE_SAME_DAY,
                existing_item=item,
                message=f"You already have a booking at {item.course_name} on this day",
            ))
            continue

        try:
            gap = hours_between(time, item.time)
        except ValueError:
            # an unparseable tee time can't be placed on the clock
            continue

        if gap < MIN_HOURS_BETWEEN_ROUNDS:
            conflicts.append(BookingConflict(
                type=TIME_OVERLAP,
                existing_item=item,
                message=(
                    f"This overlaps with your {format_clock(item.time)} booking at {item.course_name}. "
                    f"Allow at least {MIN_HOURS_BETWEEN_ROUNDS} hours between rounds."
                ),
            ))

    return conflicts


def has_blocking_conflict(conflicts):
    return any(c.blocking for c in conflicts)
