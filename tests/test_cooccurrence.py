"""
Tests for counting dishes ordered together.
"""
from loading.chart import to_pair_rows
from transformation.calculations import identify_dish_pairs
from transformation.cooccurrence import count_item_pairs, pair_key
from transformation.records import LineItem, Order


def test_pair_key_is_order_independent():
    assert pair_key("Lumpia", "Adobo") == pair_key("Adobo", "Lumpia") == "Adobo & Lumpia"


def test_single_item_order_adds_nothing():
    assert count_item_pairs([["Adobo"]]) == {}


def test_duplicate_names_count_once():
    assert count_item_pairs([["X", "X", "Y"]]) == {"X & Y": 1}


def test_never_both_orientations():
    counts = count_item_pairs([["B", "A"], ["A", "B"], ["C", "B", "A"]])
    assert counts == {"A & B": 3, "A & C": 1, "B & C": 1}
    assert "B & A" not in counts


def test_custom_separator():
    assert count_item_pairs([["b", "a"]], separator="|") == {"a|b": 1}


def test_identify_dish_pairs_ranks_counts():
    orders = [
        Order("o1", "r1", items=(LineItem("Rice"), LineItem("Adobo"))),
        Order("o2", "r1", items=(LineItem("Adobo"), LineItem("Rice"), LineItem("Tea"))),
        Order("o3", "r1", items=(LineItem("Tea"),)),
    ]
    rows = to_pair_rows(identify_dish_pairs(orders, 2))
    assert rows == [
        {"rank": 1, "pair": "Adobo & Rice", "count": 2},
        {"rank": 2, "pair": "Adobo & Tea", "count": 1},
    ]
