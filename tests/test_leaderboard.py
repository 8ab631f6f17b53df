"""
Tests for top-N ranking and the leaderboard calculations built on it.
"""
import pytest

from loading.chart import to_leaderboard_rows
from transformation.calculations import (
    credit_likes,
    identify_most_liked,
    identify_top_customers,
    identify_top_dishes,
)
from transformation.leaderboard import is_podium, rank_top_n
from transformation.records import Interaction, LineItem, Order, Video


def pairs(entries):
    return [(entry.subject_id, entry.value) for entry in entries]


class TestRankTopN:
    """Test the leaderboard ranker."""

    def test_ties_keep_input_order(self):
        totals = {"u1": 5, "u2": 9, "u3": 9}
        assert pairs(rank_top_n(totals, 2)) == [("u2", 9), ("u3", 9)]

    def test_ties_follow_insertion_order_when_reversed(self):
        totals = {"u3": 9, "u1": 5, "u2": 9}
        assert pairs(rank_top_n(totals, 2)) == [("u3", 9), ("u2", 9)]

    @pytest.mark.parametrize("n", [1, 3, 5, 10])
    def test_length_and_ordering(self, n):
        totals = {f"s{i}": (i * 7) % 5 for i in range(6)}
        entries = rank_top_n(totals, n)
        assert len(entries) == min(n, len(totals))
        values = [entry.value for entry in entries]
        assert values == sorted(values, reverse=True)
        assert [entry.rank for entry in entries] == list(range(1, len(entries) + 1))

    def test_zero_values_are_ranked(self):
        assert pairs(rank_top_n({"a": 0, "b": 2}, 5)) == [("b", 2), ("a", 0)]

    def test_empty_or_non_positive_n(self):
        assert rank_top_n({}, 3) == []
        assert rank_top_n({"a": 1}, 0) == []

    def test_display_names_fall_back_to_id(self):
        entries = rank_top_n({"u1": 2, "u2": 1}, 2, names={"u1": "Ana"})
        assert [entry.display_name for entry in entries] == ["Ana", "u2"]


class TestPodium:
    def test_first_three_ranks_are_podium(self):
        assert [is_podium(rank) for rank in range(1, 6)] == [True, True, True, False, False]

    def test_rows_mark_podium(self):
        rows = to_leaderboard_rows(rank_top_n({"a": 4, "b": 3, "c": 2, "d": 1}, 4))
        assert [row["podium"] for row in rows] == [True, True, True, False]
        assert rows[0] == {"rank": 1, "subject": "a", "name": "a", "value": 4, "podium": True}


class TestLeaderboardCalculations:
    """Test dish, customer and likes leaderboards."""

    def test_top_dishes_by_quantity(self):
        orders = [
            Order("o1", "r1", items=(LineItem("Adobo", 2), LineItem("Halo-halo", 1))),
            Order("o2", "r1", items=(LineItem("Halo-halo", 4),)),
            Order("o3", "r1", items=(LineItem("Lumpia", 1),)),
        ]
        assert pairs(identify_top_dishes(orders, 2)) == [("Halo-halo", 5), ("Adobo", 2)]

    def test_top_customers_by_order_count(self):
        orders = [
            Order("o1", "r1", user_id="u1"),
            Order("o2", "r1", user_id="u2"),
            Order("o3", "r1", user_id="u2"),
            Order("o4", "r1"),
        ]
        entries = identify_top_customers(orders, 5, names={"u2": "Bea"})
        assert [(e.display_name, e.value) for e in entries] == [("Bea", 2), ("u1", 1)]

    def test_likes_credited_to_video_owner(self):
        videos = [Video("v1", uploader_id="owner1"), Video("v2", uploader_id="owner2")]
        interactions = [
            Interaction("i1", "like", "fan1", "v1"),
            Interaction("i2", "like", "fan2", "v1"),
            Interaction("i3", "like", "fan1", "v2"),
            Interaction("i4", "comment", "fan3", "v2"),
        ]
        assert credit_likes(interactions, videos) == {"owner1": 2, "owner2": 1}
        assert pairs(identify_most_liked(interactions, videos, 1)) == [("owner1", 2)]

    def test_likes_credited_to_liker_when_configured(self):
        videos = [Video("v1", uploader_id="owner1")]
        interactions = [
            Interaction("i1", "like", "fan1", "v1"),
            Interaction("i2", "like", "fan1", "v1"),
            Interaction("i3", "like", "fan2", "v1"),
        ]
        assert credit_likes(interactions, videos, credit_owner=False) == {"fan1": 2, "fan2": 1}

    def test_like_on_unknown_target_credits_target(self):
        interactions = [Interaction("i1", "like", "fan1", "user42")]
        assert credit_likes(interactions, []) == {"user42": 1}
