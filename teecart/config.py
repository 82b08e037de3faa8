"""
Runtime configuration for the tee time cart.

Settings read from the environment use the variable of the same name.
The round buffer and player cap are fixed. Keyword tables are plain data
so new locales can be added without touching the classification code.
"""

import os

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# =============================================================================
# SERVER
# =============================================================================
PORT = int(os.environ.get("PORT", 5001))
SECRET_KEY = os.environ.get("SECRET_KEY", "change-me-set-SECRET_KEY-env-var")

# Upstream booking backend (courses, slot search, checkout, payment confirmation)
BACKEND_URL = os.environ.get("BACKEND_URL", "http://localhost:5000").rstrip("/")
BACKEND_TIMEOUT = float(os.environ.get("BACKEND_TIMEOUT", 10))

# =============================================================================
# CART STORAGE
# =============================================================================
CART_DATA_DIR = os.environ.get("CART_DATA_DIR", os.path.join(BASE_DIR, "cart_data"))
CART_STORAGE_KEY = os.environ.get("CART_STORAGE_KEY", "marbella-golf-booking-cart")

# Golf rounds at different venues need this many hours between tee times.
# Same for every course.
MIN_HOURS_BETWEEN_ROUNDS = 4

MAX_PLAYERS_PER_TEE = 4

# =============================================================================
# PACKAGE TIME WINDOWS
# =============================================================================
# Defaults used when a course's contract does not set its own windows.
EARLY_BIRD_END_TIME = os.environ.get("EARLY_BIRD_END_TIME", "10:00")
TWILIGHT_START_TIME = os.environ.get("TWILIGHT_START_TIME", "14:00")

# Fallback name keywords per locale, used when a package has no structured flag
EARLY_BIRD_KEYWORDS = {
    "en": ("early bird", "earlybird"),
    "es": ("madrugador",),
}
TWILIGHT_KEYWORDS = {
    "en": ("twilight",),
    "es": ("crepuscular",),
}

# =============================================================================
# PAYMENT CONFIRMATION
# =============================================================================
PAYMENT_CONFIRM_MAX_ATTEMPTS = int(os.environ.get("PAYMENT_CONFIRM_MAX_ATTEMPTS", 5))
PAYMENT_CONFIRM_DELAY_SECONDS = float(os.environ.get("PAYMENT_CONFIRM_DELAY_SECONDS", 2))
