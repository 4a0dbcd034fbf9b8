"""
Unit tests for the ranked selection helper.
"""

from datetime import date

from review_audit.models.review import Review
from review_audit.utils.selection import select_ranked


def _review(text: str, rating: float = 5.0) -> Review:
    return Review(
        raw_date_text="2024-01-01",
        parsed_date=date(2024, 1, 1),
        rating=rating,
        text=text,
    )


def test_selects_top_k_from_primary_pool():
    items = [3, 9, 1, 7, 5]
    assert select_ranked([items], 3, key=lambda x: x) == [9, 7, 5]


def test_ascending_order():
    assert select_ranked([[3, 9, 1]], 2, key=lambda x: x, reverse=False) == [1, 3]


def test_backfill_from_secondary_pool():
    short = _review("short")
    longest = _review("x" * 40)
    middle = _review("y" * 30)
    other = _review("z" * 35)

    primary = [short, longest]
    secondary = [short, longest, middle, other]

    selected = select_ranked(
        [primary, secondary],
        3,
        key=lambda r: len(r.text),
        predicate=lambda r: len(r.text) > 20,
    )

    # Primary pick first, then the best remaining secondary candidates
    assert selected == [longest, other, middle]


def test_backfill_never_repeats_selected_items():
    a = _review("a" * 25)
    b = _review("a" * 25)  # Equal value, different review

    selected = select_ranked([[a], [a, b]], 3, key=lambda r: len(r.text))

    assert len(selected) == 2
    assert selected[0] is a
    assert selected[1] is b


def test_exhausted_pools_return_fewer_items():
    assert select_ranked([[1], [2]], 5, key=lambda x: x) == [1, 2]


def test_zero_limit():
    assert select_ranked([[1, 2, 3]], 0, key=lambda x: x) == []


def test_stable_for_equal_keys():
    first = _review("same length text here!")
    second = _review("same length text here?")

    selected = select_ranked([[first, second]], 2, key=lambda r: len(r.text))
    assert selected == [first, second]
