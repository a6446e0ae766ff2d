"""Tests for room-category price and buffer lookup."""

from cinesched.engine.pricing import buffers_for_category, price_for_category, price_for_room
from cinesched.models.catalog import Room, RoomCategory


class TestPricing:
    """Test category defaults and overrides."""

    def test_category_prices(self):
        assert price_for_category(RoomCategory.STANDARD_2D) == 60000
        assert price_for_category(RoomCategory.STANDARD_3D) == 80000
        assert price_for_category(RoomCategory.IMAX) == 100000
        assert price_for_category(RoomCategory.IMAX_3D) == 100000
        assert price_for_category("VIP_4DX") == 120000

    def test_unknown_category_gets_standard_price(self):
        assert price_for_category("DRIVE_IN") == 60000
        assert buffers_for_category("DRIVE_IN") == (20, 15)

    def test_override_wins(self):
        room = Room(id=1, name="Room A", category=RoomCategory.IMAX)
        assert price_for_room(room) == 100000
        assert price_for_room(room, 0) == 0
        assert price_for_room(room, 75000) == 75000
