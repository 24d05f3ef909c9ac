"""Tests for per-subject competition ranking."""

from decimal import Decimal

import pytest

from school_admin.services.ranking import coerce_total, format_position, rank_scores


def _ranks(records):
    return [record["rank"] for record in rank_scores(records)]


def test_empty_input():
    assert rank_scores([]) == []


def test_single_record_without_total_ranks_first():
    ranked = rank_scores([{"subject": "M"}])

    assert ranked == [{"subject": "M", "rank": 1}]
    assert "total" not in ranked[0]


def test_ties_share_rank_and_skip_positions():
    records = [
        {"subject": "M", "total": 80},
        {"subject": "M", "total": 80},
        {"subject": "M", "total": 60},
    ]

    assert _ranks(records) == [1, 1, 3]


def test_class_scenario_sorted_by_total():
    records = [
        {"subject": "Mathematics", "student_id": 1, "total": 72.5},
        {"subject": "Mathematics", "student_id": 2, "total": 72.5},
        {"subject": "Mathematics", "student_id": 3, "total": 90},
        {"subject": "Mathematics", "student_id": 4, "total": 40},
    ]

    ranked = rank_scores(records)

    assert [(r["student_id"], r["rank"]) for r in ranked] == [(3, 1), (1, 2), (2, 2), (4, 4)]


def test_subjects_keep_first_seen_order():
    records = [
        {"subject": "M", "total": 70},
        {"subject": "E", "total": 85},
        {"subject": "M", "total": 90},
    ]

    ranked = rank_scores(records)

    assert [(r["subject"], r["total"], r["rank"]) for r in ranked] == [
        ("M", 90, 1),
        ("M", 70, 2),
        ("E", 85, 1),
    ]


def test_totals_within_epsilon_tie():
    records = [
        {"subject": "M", "total": 70.004},
        {"subject": "M", "total": 70.0},
        {"subject": "M", "total": 69.5},
    ]

    assert _ranks(records) == [1, 1, 3]


def test_totals_beyond_epsilon_rank_separately():
    records = [
        {"subject": "M", "total": 70.02},
        {"subject": "M", "total": 70.0},
    ]

    assert _ranks(records) == [1, 2]


def test_decimal_totals_from_database():
    records = [
        {"subject": "Mathematics", "student_id": 1, "total": Decimal("72.50")},
        {"subject": "Mathematics", "student_id": 2, "total": Decimal("72.50")},
        {"subject": "Mathematics", "student_id": 3, "total": Decimal("90.00")},
        {"subject": "Mathematics", "student_id": 4, "total": Decimal("40.00")},
    ]

    ranked = rank_scores(records)

    assert [(r["student_id"], r["rank"]) for r in ranked] == [(3, 1), (1, 2), (2, 2), (4, 4)]
    assert ranked[0]["total"] == Decimal("90.00")


def test_mixed_decimal_float_and_string_totals():
    records = [
        {"subject": "M", "student_id": 1, "total": Decimal("72.50")},
        {"subject": "M", "student_id": 2, "total": 72.5},
        {"subject": "M", "student_id": 3, "total": "72.504"},
        {"subject": "M", "student_id": 4, "total": Decimal("80")},
        {"subject": "M", "student_id": 5, "total": "60"},
    ]

    ranked = rank_scores(records)

    assert [(r["student_id"], r["rank"]) for r in ranked] == [(4, 1), (3, 2), (1, 2), (2, 2), (5, 5)]



def test_malformed_totals_rank_as_zero():
    records = [
        {"subject": "M", "total": "abc"},
        {"subject": "M", "total": None},
        {"subject": "M", "total": "55.5"},
        {"subject": "M", "total": -5},
    ]

    ranked = rank_scores(records)

    assert [(r["total"], r["rank"]) for r in ranked] == [
        ("55.5", 1),
        ("abc", 2),
        (None, 2),
        (-5, 4),
    ]


def test_missing_subject_groups_together():
    records = [{"total": 10}, {"subject": "M", "total": 50}, {"total": 30}]

    ranked = rank_scores(records)

    assert [(r.get("subject"), r["rank"]) for r in ranked] == [(None, 1), (None, 2), ("M", 1)]


def test_input_is_not_mutated():
    records = [{"subject": "M", "total": 10}, {"subject": "M", "total": 20}]

    rank_scores(records)

    assert records == [{"subject": "M", "total": 10}, {"subject": "M", "total": 20}]


def test_reranking_is_stable():
    records = [
        {"subject": "M", "student_id": 1, "total": 60},
        {"subject": "E", "student_id": 1, "total": 75},
        {"subject": "M", "student_id": 2, "total": 60},
        {"subject": "M", "student_id": 3, "total": 95},
        {"subject": "E", "student_id": 2, "total": 75.001},
    ]

    first = rank_scores(records)
    again = rank_scores([{k: v for k, v in r.items() if k != "rank"} for r in first])

    assert rank_scores(records) == first
    assert again == first


@pytest.mark.parametrize("value,expected", [
    (None, 0.0),
    ("", 0.0),
    ("12.5", 12.5),
    (float("nan"), 0.0),
    (True, 0.0),
    (7, 7.0),
])
def test_coerce_total(value, expected):
    assert coerce_total(value) == expected


@pytest.mark.parametrize("position,expected", [
    (1, "1st"),
    (2, "2nd"),
    (3, "3rd"),
    (4, "4th"),
    (11, "11th"),
    (12, "12th"),
    (13, "13th"),
    (21, "21st"),
    (23, "23rd"),
    (112, "112th"),
])
def test_format_position(position, expected):
    assert format_position(position) == expected
