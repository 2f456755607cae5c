"""
Tests for the per-star rating distribution
"""
from hypothesis import given, strategies as st

from services.rating_aggregator import build_rating_distribution


class TestBuildRatingDistribution:

    def test_no_reviews_is_all_zero(self):
        assert build_rating_distribution({}, 0) == {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}

    def test_single_star(self):
        assert build_rating_distribution({4: 3}, 3) == {"1": 0, "2": 0, "3": 0, "4": 100, "5": 0}

    def test_thirds_round_independently(self):
        # 33.33 each, so the total is 99 and is not normalized
        distribution = build_rating_distribution({1: 1, 3: 1, 5: 1}, 3)
        assert distribution == {"1": 33, "2": 0, "3": 33, "4": 0, "5": 33}
        assert sum(distribution.values()) == 99

    def test_half_rounds_up(self):
        # 1/8 = 12.5% and 7/8 = 87.5%
        distribution = build_rating_distribution({2: 1, 5: 7}, 8)
        assert distribution["2"] == 13
        assert distribution["5"] == 88
        assert sum(distribution.values()) == 101

    def test_two_thirds(self):
        distribution = build_rating_distribution({4: 2, 5: 1}, 3)
        assert distribution["4"] == 67
        assert distribution["5"] == 33

    def test_unknown_star_ignored(self):
        distribution = build_rating_distribution({5: 1, 9: 1}, 1)
        assert set(distribution) == {"1", "2", "3", "4", "5"}
        assert distribution["5"] == 100

    @given(st.dictionaries(st.integers(min_value=1, max_value=5),
                           st.integers(min_value=1, max_value=10_000), min_size=1))
    def test_percentages_stay_close_to_100(self, star_counts):
        total = sum(star_counts.values())
        distribution = build_rating_distribution(star_counts, total)

        assert all(0 <= value <= 100 for value in distribution.values())
        # Each star is off by at most half a point
        assert 97 < sum(distribution.values()) < 103
        for star in range(1, 6):
            if star not in star_counts:
                assert distribution[str(star)] == 0
