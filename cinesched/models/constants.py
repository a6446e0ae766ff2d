"""Constants for cinesched.

This module centralizes all magic numbers and default values used throughout the application.
"""

from cinesched.models.catalog import RoomCategory


# Screening buffers
DEFAULT_PRE_SHOW_MINUTES = 20  # Advertising before the feature
DEFAULT_POST_SHOW_MINUTES = 15  # Cleaning after the feature
DEFAULT_FEATURE_MINUTES = 120  # Used when a movie has no known duration

# Pricing (VND)
DEFAULT_BASE_PRICE = 60000

# Timeline (interactive placement)
TIMELINE_START_HOUR = 8
TIMELINE_UNITS_PER_MINUTE = 2.5
TIMELINE_SNAP_MINUTES = 5

# Room category profiles: default price and pre/post-show buffers
ROOM_CATEGORY_PROFILES = {
    RoomCategory.STANDARD_2D: {"price": 60000, "pre_show": 20, "post_show": 15},
    RoomCategory.STANDARD_3D: {"price": 80000, "pre_show": 20, "post_show": 15},
    RoomCategory.IMAX: {"price": 100000, "pre_show": 20, "post_show": 15},
    RoomCategory.IMAX_3D: {"price": 100000, "pre_show": 20, "post_show": 15},
    RoomCategory.VIP_4DX: {"price": 120000, "pre_show": 20, "post_show": 15},
}

# Commit
DEFAULT_COMMIT_TIMEOUT_SEC = 30.0
