"""
Unit tests for the Temporal Aggregator and its metric helpers.
"""

from datetime import date

import pytest

from review_audit.agents.aggregation import (
    TemporalAggregator,
    average_rating,
    previous_period,
    round_half_up,
    rating_distribution,
    reviews_to_improve,
    star_bucket,
)
from review_audit.exceptions import NoReviewsError
from review_audit.models.review import Review, quarter_of


def make_review(day: str, rating: float, text: str = "") -> Review:
    parsed = date.fromisoformat(day)
    return Review(raw_date_text=day, parsed_date=parsed, rating=float(rating), text=text)


@pytest.fixture
def aggregator():
    return TemporalAggregator()


@pytest.fixture
def two_quarter_reviews():
    """Q4 2023: 2 reviews averaging 4.0. Q1 2024: 4 reviews averaging 4.5."""
    return [
        make_review("2023-10-05", 4),
        make_review("2023-12-20", 4),
        make_review("2024-01-10", 5),
        make_review("2024-02-01", 4),
        make_review("2024-03-15", 5),
        make_review("2024-03-30", 4),
    ]


# --- Helpers ---

@pytest.mark.parametrize("month,expected", [
    (1, 1), (3, 1), (4, 2), (6, 2), (7, 3), (9, 3), (10, 4), (12, 4),
])
def test_quarter_of(month, expected):
    assert quarter_of(month) == expected


def test_quarter_of_matches_review_quarter():
    review = make_review("2024-08-31", 4)
    assert review.quarter == quarter_of(8) == 3


def test_previous_period():
    assert previous_period(2024, 1) == (2023, 4)
    assert previous_period(2024, 3) == (2024, 2)


def test_average_rating():
    reviews = [make_review("2024-01-01", r) for r in (4, 5, 5)]
    assert average_rating(reviews) == 4.67


def test_average_rating_empty_is_zero():
    assert average_rating([]) == 0.0


def test_average_rating_rounds_ties_up():
    # 33 / 8 is exactly 4.125
    reviews = [make_review("2024-01-01", 4) for _ in range(7)]
    reviews.append(make_review("2024-01-02", 5))
    assert average_rating(reviews) == 4.13


@pytest.mark.parametrize("value,places,expected", [
    (4.125, 2, 4.13), (4.25, 1, 4.3), (2.675, 2, 2.67), (4.0, 2, 4.0),
])
def test_round_half_up(value, places, expected):
    assert round_half_up(value, places) == expected


@pytest.mark.parametrize("rating,expected", [
    (0.4, 0), (1.4, 1), (2.5, 3), (4.49, 4), (4.5, 5), (5.0, 5), (6.0, 6),
])
def test_star_bucket_rounds_half_up(rating, expected):
    assert star_bucket(rating) == expected


def test_distribution_excludes_out_of_range():
    ratings = [1, 1.4, 2.5, 4.5, 5, 0, 6, 0.4]
    reviews = [make_review("2024-01-01", r) for r in ratings]

    buckets = rating_distribution(reviews)

    assert [b.stars for b in buckets] == [1, 2, 3, 4, 5]
    assert [b.count for b in buckets] == [2, 0, 1, 0, 2]
    assert sum(b.count for b in buckets) == 5
    assert buckets[0].label == "1 Star"
    assert buckets[4].label == "5 Stars"


# --- Reviews to improve ---

def test_reviews_to_improve_examples():
    assert reviews_to_improve(4.0, 10) == 2
    assert reviews_to_improve(4.5, 4) == 1
    assert reviews_to_improve(0.0, 0) == 0


def test_reviews_to_improve_target_rounds_half_up():
    # 4.15 + 0.1 is exactly 4.25, so the target is 4.3 rather than 4.2
    assert reviews_to_improve(4.15, 100) == 22


@pytest.mark.parametrize("average", [4.9, 4.95, 4.99, 5.0, 5.5])
def test_reviews_to_improve_zero_near_ceiling(average):
    assert reviews_to_improve(average, 250) == 0


@pytest.mark.parametrize("average", [1.0, 2.75, 3.5, 4.2, 4.33, 4.5, 4.84])
def test_reviews_to_improve_is_smallest_sufficient(average):
    target = round_half_up(average + 0.1, 1)
    for count in (1, 7, 40, 333):
        k = reviews_to_improve(average, count)
        total = average * count

        assert isinstance(k, int)
        assert k >= 0
        assert (total + 5 * k) / (count + k) >= target - 1e-9
        if k > 0:
            assert (total + 5 * (k - 1)) / (count + k - 1) < target


def test_reviews_to_improve_monotonic_in_count():
    previous = 0
    for count in range(0, 300):
        needed = reviews_to_improve(4.2, count)
        assert needed >= previous
        previous = needed


# --- Aggregation ---

def test_end_to_end_quarter_scenario(aggregator, two_quarter_reviews):
    result = aggregator.aggregate(two_quarter_reviews, "Maple Court", year=2024, quarter=1)

    assert result.client_name == "Maple Court"
    assert result.all_time_total == 6
    assert result.ytd_total == 4
    assert result.ytd_average == 4.5
    assert result.quarter_total == 4
    assert result.quarter_average == 4.5
    assert result.previous_period == (2023, 4)
    assert len(result.previous_quarter_reviews) == 2
    assert all(r.year == 2023 and r.quarter == 4 for r in result.previous_quarter_reviews)
    assert average_rating(result.previous_quarter_reviews) == 4.0
    assert result.reviews_to_improve == 1


def test_quarterly_trend_has_four_zero_filled_entries(aggregator, two_quarter_reviews):
    result = aggregator.aggregate(two_quarter_reviews, "X", year=2024, quarter=1)

    assert [b.quarter for b in result.quarterly_trend] == [1, 2, 3, 4]
    assert [b.label for b in result.quarterly_trend] == ["Q1", "Q2", "Q3", "Q4"]
    assert [b.review_count for b in result.quarterly_trend] == [4, 0, 0, 0]
    assert [b.average_rating for b in result.quarterly_trend] == [4.5, 0.0, 0.0, 0.0]
    assert all(b.year == 2024 for b in result.quarterly_trend)


def test_quarterly_trend_for_year_without_data(aggregator, two_quarter_reviews):
    result = aggregator.aggregate(two_quarter_reviews, "X", year=2030, quarter=2)

    assert result.ytd_total == 0
    assert result.ytd_average == 0.0
    assert len(result.quarterly_trend) == 4
    assert sum(b.review_count for b in result.quarterly_trend) == 0
    assert result.reviews_to_improve == 0


def test_yearly_trend_keeps_five_most_recent_years(aggregator):
    reviews = [make_review(f"{y}-06-01", 4) for y in range(2016, 2025)]
    reviews.append(make_review("2024-07-01", 5))

    result = aggregator.aggregate(reviews, "X", year=2024, quarter=3)

    assert [b.year for b in result.yearly_trend] == [2020, 2021, 2022, 2023, 2024]
    assert result.yearly_trend[-1].review_count == 2
    assert result.yearly_trend[-1].average_rating == 4.5


def test_yearly_trend_skips_years_without_reviews(aggregator):
    reviews = [make_review("2019-01-01", 3), make_review("2024-01-01", 5)]
    result = aggregator.aggregate(reviews, "X", year=2024, quarter=1)
    assert [b.year for b in result.yearly_trend] == [2019, 2024]


def test_distribution_covers_ytd_only(aggregator, two_quarter_reviews):
    result = aggregator.aggregate(two_quarter_reviews, "X", year=2024, quarter=1)
    assert [b.count for b in result.distribution] == [0, 0, 0, 2, 2]


def test_out_of_range_ratings_still_count_in_totals(aggregator):
    reviews = [make_review("2024-01-01", 0), make_review("2024-01-02", 9)]
    result = aggregator.aggregate(reviews, "X", year=2024, quarter=1)

    assert result.ytd_total == 2
    assert result.ytd_average == 4.5
    assert sum(b.count for b in result.distribution) == 0


def test_top_reviews_backfill_from_ytd(aggregator):
    q1_best = make_review("2024-02-01", 5, "Wonderful staff and a spotless gym area")
    q1_second = make_review("2024-02-02", 5, "Quick maintenance every time")
    q1_four_star = make_review("2024-02-03", 4, "Pretty good place overall, a few issues")
    q1_short = make_review("2024-02-04", 5, "Great!")
    q2_long = make_review("2024-05-01", 5, "The leasing office went above and beyond for us")
    q3_long = make_review("2024-08-01", 5, "Love living here, pool is great")
    reviews = [q1_best, q1_second, q1_four_star, q1_short, q2_long, q3_long]

    result = aggregator.aggregate(reviews, "X", year=2024, quarter=1)

    assert result.top_reviews == [q1_best, q1_second, q2_long]


def test_top_reviews_prefers_quarter(aggregator):
    quarter = [
        make_review(f"2024-01-0{i}", 5, "x" * (21 + i)) for i in range(1, 5)
    ]
    longer_elsewhere = make_review("2024-06-01", 5, "y" * 200)

    result = aggregator.aggregate(quarter + [longer_elsewhere], "X", year=2024, quarter=1)

    assert len(result.top_reviews) == 3
    assert longer_elsewhere not in result.top_reviews
    assert [len(r.text) for r in result.top_reviews] == [25, 24, 23]


def test_defaults_to_latest_review_period(aggregator, two_quarter_reviews):
    result = aggregator.aggregate(two_quarter_reviews, "X")
    assert (result.year, result.quarter) == (2024, 1)


def test_override_replaces_reviews_to_improve(aggregator, two_quarter_reviews):
    result = aggregator.aggregate(
        two_quarter_reviews, "X", year=2024, quarter=1, reviews_to_improve_override=12
    )
    assert result.reviews_to_improve == 12


def test_invalid_quarter_raises(aggregator, two_quarter_reviews):
    with pytest.raises(ValueError):
        aggregator.aggregate(two_quarter_reviews, "X", year=2024, quarter=5)


def test_empty_reviews_raise(aggregator):
    with pytest.raises(NoReviewsError, match="No valid reviews found"):
        aggregator.aggregate([], "X", year=2024, quarter=1)


def test_result_to_dict(aggregator, two_quarter_reviews):
    summary = aggregator.aggregate(two_quarter_reviews, "X", year=2024, quarter=1).to_dict()

    assert summary["metrics"]["quarter_total"] == 4
    assert len(summary["metrics"]["quarterly_trend"]) == 4
    assert summary["previous_period"] == {"year": 2023, "quarter": 4}
    assert summary["previous_quarter_total"] == 2
