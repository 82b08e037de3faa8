"""
Time-of-day eligibility for rate packages.

Packages come straight from the provider payload (camelCase dicts). Each one is
classified twice, independently:

    early bird  -> isEarlyBird flag, else a name keyword (EARLY_BIRD_KEYWORDS)
    twilight    -> isTwilight flag, else a name keyword (TWILIGHT_KEYWORDS)

An early-bird package is only offered before the early-bird end; a twilight
package only at or after the twilight start. A package carrying its own
timeRestriction ("07:00-10:00", "from 15:00", "15:00 onwards") uses that window
instead of the default one. Unclassified packages are always offered.
"""

import re
from dataclasses import dataclass
from typing import Optional

from teecart.config import (
    EARLY_BIRD_END_TIME,
    EARLY_BIRD_KEYWORDS,
    TWILIGHT_KEYWORDS,
    TWILIGHT_START_TIME,
)
from teecart.timeutils import minutes_of_day, parse_clock

RANGE_RE = re.compile(r'^\s*(\d{1,2}:\d{2})\s*[-–]\s*(\d{1,2}:\d{2})\s*$')
FROM_RE = re.compile(r'^\s*from\s+(\d{1,2}:\d{2})\s*$', re.IGNORECASE)
ONWARDS_RE = re.compile(r'^\s*(\d{1,2}:\d{2})\s+onwards\s*$', re.IGNORECASE)


@dataclass(frozen=True)
class TimeWindow:
    """Minutes after midnight; start inclusive, end exclusive, None is open"""

    start: Optional[int] = None
    end: Optional[int] = None

    def contains(self, minutes):
        if self.start is not None and minutes < self.start:
            return False
        if self.end is not None and minutes >= self.end:
            return False
        return True


@dataclass(frozen=True)
class PackageWindows:
    early_bird_end: int = parse_clock(EARLY_BIRD_END_TIME)
    twilight_start: int = parse_clock(TWILIGHT_START_TIME)

    @classmethod
    def from_contract_settings(cls, settings=None):
        """
        Build windows from a course's contract settings, e.g.
        {"earlyBirdEndTime": "09:30", "twilightStartTime": "15:00"}.
        Missing or malformed values keep the configured defaults.
        """
        settings = settings or {}
        defaults = cls()
        return cls(
            early_bird_end=_clock_or_default(settings.get("earlyBirdEndTime"), defaults.early_bird_end),
            twilight_start=_clock_or_default(settings.get("twilightStartTime"), defaults.twilight_start),
        )

    @property
    def early_bird(self):
        return TimeWindow(end=self.early_bird_end)

    @property
    def twilight(self):
        return TimeWindow(start=self.twilight_start)


def _clock_or_default(value, default):
    if not value:
        return default
    try:
        return parse_clock(value)
    except ValueError:
        print(f"  ⚠️  Ignoring invalid contract time {value!r}")
        return default


def _all_keywords(table):
    return [kw for words in table.values() for kw in words]


def _name_matches(name, table):
    lowered = (name or "").lower()
    return any(kw in lowered for kw in _all_keywords(table))


def is_early_bird(package):
    return bool(package.get("isEarlyBird")) or _name_matches(package.get("name"), EARLY_BIRD_KEYWORDS)


def is_twilight(package):
    return bool(package.get("isTwilight")) or _name_matches(package.get("name"), TWILIGHT_KEYWORDS)


def is_discounted(package):
    return is_early_bird(package) or is_twilight(package)


def parse_time_restriction(text):
    """
    Parse a free-form restriction into a TimeWindow.

    Returns None when the text is empty or in a format we don't understand.
    """
    if not text:
        return None
    text = str(text)
    try:
        match = RANGE_RE.match(text)
        if match:
            start, end = parse_clock(match.group(1)), parse_clock(match.group(2))
            if start >= end:
                return None
            return TimeWindow(start=start, end=end)
        match = FROM_RE.match(text) or ONWARDS_RE.match(text)
        if match:
            return TimeWindow(start=parse_clock(match.group(1)))
    except ValueError:
        return None
    return None


def is_eligible(package, tee_minutes, windows):
    early = is_early_bird(package)
    twilight = is_twilight(package)
    if not early and not twilight:
        return True

    restriction = parse_time_restriction(package.get("timeRestriction"))
    if restriction is not None:
        return restriction.contains(tee_minutes)

    if early and not windows.early_bird.contains(tee_minutes):
        return False
    if twilight and not windows.twilight.contains(tee_minutes):
        return False
    return True


def filter_packages(packages, tee_time, windows=None):
    """Packages valid for the tee time, in their original order"""
    windows = windows or PackageWindows()
    tee_minutes = minutes_of_day(tee_time)
    return [pkg for pkg in packages or [] if is_eligible(pkg, tee_minutes, windows)]


# =============================================================================
# DISCOUNTED VARIANTS
# =============================================================================
def _keyword_pattern():
    words = _all_keywords(EARLY_BIRD_KEYWORDS) + _all_keywords(TWILIGHT_KEYWORDS)
    alternatives = sorted((r'\s*'.join(map(re.escape, w.split())) for w in words), key=len, reverse=True)
    return re.compile(r'\b(?:' + '|'.join(alternatives) + r')\b', re.IGNORECASE)


KEYWORD_RE = _keyword_pattern()


def base_product_name(name):
    """"Greenfee + Buggy Earlybird" -> "greenfee + buggy" """
    stripped = KEYWORD_RE.sub(' ', name or '')
    return re.sub(r'\s+', ' ', stripped).strip().lower()


def prefer_discounted_variants(packages):
    """
    Drop regular packages that have an early-bird or twilight variant in the list.

    Call this on an already time-filtered list so only variants that are
    actually bookable hide their regular equivalent.
    """
    discounted_names = {base_product_name(p.get("name")) for p in packages if is_discounted(p)}
    return [
        p for p in packages
        if is_discounted(p) or base_product_name(p.get("name")) not in discounted_names
    ]


def display_packages(packages, tee_time, windows=None):
    """What the booking dialog offers for a tee time"""
    return prefer_discounted_variants(filter_packages(packages, tee_time, windows))
