"""
Tests for admin statistics, search and sorting.
"""

from datetime import date
from types import SimpleNamespace

import pytest

from couponbot.core.dashboard import coupon_statistics, describe_coupon, search_coupons


def coupon(code, used=False, valid_from="01/01/2024", valid_to="31/12/2024", **extra):
    values = dict(code=code, type="", used=used, used_by="", used_date="",
                  valid_from=valid_from, valid_to=valid_to)
    values.update(extra)
    return SimpleNamespace(**values)


class TestStatistics:

    def test_counts(self):
        coupons = [
            coupon("USED", used=True, valid_to="01/01/2020"),
            coupon("ACTIVE"),
            coupon("EXPIRED", valid_to="31/05/2024"),
            coupon("ENDS_TODAY", valid_to="15/06/2024"),
            coupon("BROKEN", valid_to="whenever"),
        ]
        stats = coupon_statistics(coupons, today=date(2024, 6, 15))

        assert stats.total == 5
        assert stats.used == 1
        assert stats.unused == 4
        assert stats.expired == 1
        assert stats.active == 3

    def test_empty(self):
        stats = coupon_statistics([], today=date(2024, 6, 15))
        assert (stats.total, stats.used, stats.unused, stats.expired, stats.active) == (0, 0, 0, 0, 0)


class TestSearch:

    def setup_method(self):
        self.coupons = [
            coupon("SUMMER24", valid_to="31/08/2024", used=True),
            coupon("WINTER24", valid_to="28/02/2025"),
            coupon("spring24", valid_to="31/05/2024"),
            coupon("BROKEN", valid_to="??"),
        ]

    def test_search_is_case_insensitive_substring(self):
        assert [c.code for c in search_coupons(self.coupons, "er2")] == ["SUMMER24", "WINTER24"]
        assert [c.code for c in search_coupons(self.coupons, "SPRING")] == ["spring24"]

    def test_empty_search_returns_all(self):
        assert len(search_coupons(self.coupons, "  ")) == 4

    def test_sort_by_code(self):
        codes = [c.code for c in search_coupons(self.coupons, sort_field="code")]
        assert codes == ["BROKEN", "spring24", "SUMMER24", "WINTER24"]

    def test_sort_dates_chronologically_unreadable_last(self):
        codes = [c.code for c in search_coupons(self.coupons, sort_field="valid_to")]
        assert codes == ["spring24", "SUMMER24", "WINTER24", "BROKEN"]

    def test_sort_descending(self):
        codes = [c.code for c in search_coupons(self.coupons, sort_field="used", descending=True)]
        assert codes[0] == "SUMMER24"

    def test_unknown_sort_field(self):
        with pytest.raises(ValueError):
            search_coupons(self.coupons, sort_field="colour")


class TestDescribe:

    def test_unused(self):
        line = describe_coupon(coupon("ABC", type="gold"))
        assert "<code>ABC</code>" in line
        assert "gold" in line

    def test_used_shows_redeemer(self):
        line = describe_coupon(coupon("ABC", used=True, used_by="Alice", used_date="June 15, 2024"))
        assert "Alice" in line
        assert "15/06/2024" in line

    def test_user_text_is_quoted(self):
        line = describe_coupon(coupon("A<B", type="<i>vip", used=True,
                                      used_by="Tom <3 & Co (42)", used_date="June 15, 2024"))
        assert "<code>A&lt;B</code>" in line
        assert "&lt;i&gt;vip" in line
        assert "Tom &lt;3 &amp; Co (42)" in line
        assert "<3" not in line
