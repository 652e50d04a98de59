# src/remote_eq/config.py

"""
Central configuration settings for the Remote EQ Editor application.
"""

import os

# =============================================================================
# PARAMETER DOMAINS
# =============================================================================
MIN_FREQUENCY = 10  # Hz
MAX_FREQUENCY = 30000  # Hz
MIN_Q = 0.1
MAX_Q = 10
MAX_BAND_GAIN = 15  # dB, per-band edit range
MAX_MASTER_GAIN = 12  # dB
MAX_DISPLAY_GAIN = 12  # dB, curve/grid reference range
DISPLAY_GAIN_DIVISOR = 2.5  # +MAX_DISPLAY_GAIN sits height / 2.5 above center

CUT_FLOOR_DB = -60  # attenuation approached by low/high cut shapes
SHELF_STEEPNESS = 8  # logistic slope per octave for shelves and cuts

CURVE_STEPS = 500  # number of log-spaced segments in the sampled curve

# Fallbacks for unparseable text input (NaN in the original editor)
DEFAULT_FREQ_INPUT = 20
DEFAULT_Q_INPUT = 1
Q_WHEEL_STEP = 0.1

# =============================================================================
# CANVAS / DRAWING SETTINGS
# =============================================================================
CANVAS_WIDTH = 900
CANVAS_HEIGHT = 420
CIRCLE_RADIUS = 8
PRESS_HIT_FACTOR = 2.0  # press / hover radius = CIRCLE_RADIUS * 2
WHEEL_HIT_FACTOR = 1.5  # wheel radius = CIRCLE_RADIUS * 1.5
REFERENCE_GAINS = [12, 6, 0, -6, -12]
FREQ_LABELS = [20, 50, 100, 200, 500, 1000, 2000, 5000, 10000, 20000]

CURVE_COLOR = "#55aaff"
CURVE_COLOR_OFF = "#666666"
GRID_COLOR = "#3a3a3a"
CENTER_LINE_COLOR = "#8a8a8a"
LABEL_COLOR = "#dcdcdc"

# =============================================================================
# DEFAULT SESSION
# =============================================================================
POWER = True
DEFAULT_MASTER_GAIN = 0.0

# (type, freq, gain, Q, enabled)
DEFAULT_BANDS = [
    ("lowcut", 30, 0.0, 0.7, False),
    ("lowshelf", 100, 0.0, 1.0, False),
    ("bell", 400, 0.0, 1.0, False),
    ("bell", 1000, 0.0, 1.0, False),
    ("bell", 3000, 0.0, 1.0, False),
    ("highshelf", 8000, 0.0, 1.0, False),
    ("highcut", 18000, 0.0, 0.7, False),
]

# =============================================================================
# LIVENESS SETTINGS
# =============================================================================
POLL_INTERVAL_MS = 3000  # how often the store is probed
FRESHNESS_WINDOW_MS = 15000  # heartbeat younger than this counts as live
EPOCH_MS_THRESHOLD = 1e11  # above: epoch milliseconds
EPOCH_S_THRESHOLD = 3e8  # above (up to EPOCH_MS_THRESHOLD): epoch seconds

# =============================================================================
# REMOTE STORE
# =============================================================================
STORE_URL = os.environ.get("REMOTE_EQ_URL", "")
STORE_AUTH = os.environ.get("REMOTE_EQ_AUTH", "")
STATE_PATH = "state"
PROFILES_PATH = "profiles"
DEVICE_PATH = "device"
DEVICE_ONLINE_KEY = "online"
DEVICE_LAST_SEEN_KEY = "lastSeen"
STATE_FILENAME = "41.json"
STATE_VERSION = 1
REQUEST_TIMEOUT_MS = 5000

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
