"""Room-category price and buffer lookup for cinesched."""

from typing import Optional, Tuple

from cinesched.models.catalog import Room, RoomCategory
from cinesched.models.constants import (
    DEFAULT_BASE_PRICE,
    DEFAULT_POST_SHOW_MINUTES,
    DEFAULT_PRE_SHOW_MINUTES,
    ROOM_CATEGORY_PROFILES,
)


def _profile(category) -> Optional[dict]:
    try:
        return ROOM_CATEGORY_PROFILES.get(RoomCategory(category))
    except ValueError:
        return None


def price_for_category(category) -> int:
    """Default base price for a room category (unknown categories get the standard price)."""
    profile = _profile(category)
    return profile["price"] if profile else DEFAULT_BASE_PRICE


def price_for_room(room: Room, override: Optional[int] = None) -> int:
    """Explicit price if given, else the room category price."""
    if override is not None:
        return override
    return price_for_category(room.category)


def buffers_for_category(category) -> Tuple[int, int]:
    """(pre-show, post-show) minutes for a room category."""
    profile = _profile(category)
    if not profile:
        return DEFAULT_PRE_SHOW_MINUTES, DEFAULT_POST_SHOW_MINUTES
    return profile["pre_show"], profile["post_show"]
